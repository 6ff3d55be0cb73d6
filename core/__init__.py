"""
Core Package

Contains the shared foundation used by every other package:
- config: Pydantic Settings loaded from the environment / .env
- logging: Application-wide logger setup
- schemas: Pydantic models for rates, price points and snapshots
- utils: Timestamp helpers
"""

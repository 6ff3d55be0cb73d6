"""
FastAPI Application Package

Serves the BTC/RUB table as HTML, JSON and a WebSocket stream, and owns the
lifecycle of the refresh scheduler.
"""

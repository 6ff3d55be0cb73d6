"""
Test Suite

Structure:
- tests/unit/: Tests for individual components with mocked HTTP and clocks

Uses pytest with pytest-asyncio for testing async functionality.
"""

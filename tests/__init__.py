"""
Test suite for the production calendar.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_calendar_board_service.py -v
"""

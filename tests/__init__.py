"""
Test suite for the mapping suggestion service.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_pass_through_service.py -v
"""

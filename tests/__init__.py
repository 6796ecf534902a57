"""
ReviewHub Client Test Suite

Tests are organized into:
- unit/: Unit tests for individual components
- integration/: End-to-end client flows against the fake backend
- fake_backend.py: In-memory FastAPI stand-in for the platform API
"""

"""
Test suite for the taskboard client.

This package contains:
- unit/: models, API client and components tested against a fake API
- integration/: HTML routes through the Flask test client
"""

"""
Integration test package for the taskboard client.

Tests drive the HTML routes with the Flask test client while the remote
task API is replaced by an in-memory fake.
"""

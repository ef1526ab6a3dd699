"""Unit tests for models, the API client and the UI components."""

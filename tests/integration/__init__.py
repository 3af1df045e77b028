"""
Integration tests for the login site.

Tests use the Flask test client against a JSON user store in a
temporary directory.
"""

"""
Test suite for the login site.

This package contains:
- unit/: models, user store backends, credential and session helpers
- integration/: routes and CLI commands through Flask's test tools
- security/: session cookie and credential storage checks
"""

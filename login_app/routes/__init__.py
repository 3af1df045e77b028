"""
Routes package for the login site.

This package contains route blueprints:
- views: HTML pages for login, logout, signup and the home page
- errors: application-wide 404/500 handlers
"""

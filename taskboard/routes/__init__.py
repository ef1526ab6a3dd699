"""
Routes package for the taskboard client.

This package contains route blueprints:
- views: HTML page routes for the session gate and the dashboard
"""

"""Dependency wiring for API routers."""

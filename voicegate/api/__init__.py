"""
HTTP API: routes, middleware and dependencies.
"""

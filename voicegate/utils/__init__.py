"""
Shared utilities: structured logging and cache key hashing.
"""

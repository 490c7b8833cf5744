"""Rate limiting adapters.

This package provides a small abstraction layer so admission control can start
with an in-memory limiter and later move to Redis or another shared store
without changing the API layer.
"""

"""Product persistence adapters.

Routes and services depend on ``AbstractProductRepository``; the Supabase
adapter is used when credentials are configured, the in-memory one otherwise.
"""

"""Application layer for the ML API service.

Use cases that combine domain services with infrastructure adapters.
"""

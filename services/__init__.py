"""
Service layer for backend client operations.

This module provides thin wrappers over the MongoDB, Redis and S3 clients,
separating route handlers from driver details and error types.
"""

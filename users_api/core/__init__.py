"""
Core utilities shared across the users API.

This package hosts configuration, logging setup, password hashing and the
request validation primitives used by the routers.
"""

"""Core backend infrastructure for the Racing Insight backend.

This package contains configuration, logging, database, error, CORS, identity
and dependency helpers used by the FastAPI application entrypoint.
"""

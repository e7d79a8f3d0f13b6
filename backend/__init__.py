"""
Backend package for the quiz submission API.

This package provides a FastAPI application with a document-store
abstraction (SQLAlchemy or in-memory) for persisting quiz submissions.
"""

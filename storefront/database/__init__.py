"""
Database package: declarative base, engine/session management and models.

Import submodules explicitly when needed to avoid circular imports.
"""

__all__ = []

"""
Database package initialization.

The package follows a modular structure:
- base: declarative base and mixins
- connection: async engine and session factory construction
- models: SQLAlchemy ORM models for all entities
"""

__all__ = []

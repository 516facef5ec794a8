"""
Data layer for the consultancy auto-save service.

Provides the database connection, the draft model and repository, and the
draft-store persistence backend.

Submodules:
- database: MongoDB connection management
- models: Pydantic draft document
- repositories: Database operations and queries
- draft_backend: Auto-save backend writing drafts
"""

from .database import (
    DatabaseManager,
    get_database_manager,
)
from .draft_backend import MongoDraftBackend, draft_backend_factory
from .models import Draft

__all__ = [
    "DatabaseManager",
    "Draft",
    "MongoDraftBackend",
    "draft_backend_factory",
    "get_database_manager",
]

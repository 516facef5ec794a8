"""
Database repositories for draft storage.
"""

from .draft_repository import DraftRepository, get_draft_repository

__all__ = [
    "DraftRepository",
    "get_draft_repository",
]

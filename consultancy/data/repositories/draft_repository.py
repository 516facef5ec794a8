"""
Draft repository.

Stores the auto-saved edit buffer of each record in the ``drafts``
collection, one document per edit session id.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import TypeAdapter
from pymongo import ReturnDocument
from pymongo.results import DeleteResult

from consultancy.data.database import DatabaseManager, get_database_manager
from consultancy.data.models import Draft
from consultancy.utils.config import get_settings
from consultancy.utils.logger import get_logger

logger = get_logger(__name__)

_payload_adapter: TypeAdapter[Any] = TypeAdapter(Any)


class DraftRepository:
    """Repository for draft document operations."""

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        collection_name: Optional[str] = None,
    ) -> None:
        """Initialize repository with database connection."""
        self._db_manager = db_manager or get_database_manager()
        self._collection_name = collection_name or get_settings().database.drafts_collection

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def _get_async_collection(self) -> AsyncIOMotorCollection:
        """Get asynchronous collection instance."""
        return self._db_manager.get_async_collection(self._collection_name)

    @staticmethod
    def _to_model(document: Optional[dict[str, Any]]) -> Optional[Draft]:
        """Convert MongoDB document to Pydantic model."""
        if document is None:
            return None
        return Draft.model_validate(document)

    @staticmethod
    def _to_payload(snapshot: Any) -> Any:
        """Convert a snapshot (models, dataclasses, dates) to BSON-friendly values."""
        return _payload_adapter.dump_python(snapshot, mode="json")

    # -------------------------------------------------------------------------
    # Asynchronous Operations
    # -------------------------------------------------------------------------

    async def save_draft_async(self, session_id: str, snapshot: Any) -> Draft:
        """Upsert the draft for ``session_id`` and bump its revision."""
        collection = self._get_async_collection()
        now = datetime.now(timezone.utc)

        document = await collection.find_one_and_update(
            {"_id": session_id},
            {
                "$set": {
                    "payload": self._to_payload(snapshot),
                    "entity": Draft.entity_of(session_id),
                    "updated_at": now,
                },
                "$setOnInsert": {"created_at": now},
                "$inc": {"revision": 1},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        draft = self._to_model(document)
        if draft is None:
            raise RuntimeError(f"Draft upsert returned no document for {session_id}")

        logger.debug(f"Saved draft {session_id} (revision {draft.revision})")
        return draft

    async def get_draft_async(self, session_id: str) -> Optional[Draft]:
        """Get the draft for an edit session."""
        collection = self._get_async_collection()
        document = await collection.find_one({"_id": session_id})
        return self._to_model(document)

    async def list_drafts_async(self, entity: Optional[str] = None, limit: int = 100) -> list[Draft]:
        """List drafts, most recently updated first."""
        collection = self._get_async_collection()
        query = {"entity": entity} if entity else {}
        cursor = collection.find(query).sort("updated_at", -1).limit(limit)
        documents = await cursor.to_list(length=limit)
        return [Draft.model_validate(doc) for doc in documents]

    async def delete_draft_async(self, session_id: str) -> bool:
        """Delete the draft for an edit session (e.g. after the record is committed)."""
        collection = self._get_async_collection()
        result: DeleteResult = await collection.delete_one({"_id": session_id})
        if result.deleted_count > 0:
            logger.debug(f"Deleted draft {session_id}")
            return True
        return False


# Singleton instance
_draft_repository: Optional[DraftRepository] = None


def get_draft_repository() -> DraftRepository:
    """Get the draft repository singleton instance."""
    global _draft_repository
    if _draft_repository is None:
        _draft_repository = DraftRepository()
    return _draft_repository

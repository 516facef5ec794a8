"""MongoDB draft store as an auto-save persistence backend."""

from typing import Any, Optional

from consultancy.core.autosave import PersistenceBackend
from consultancy.data.repositories import DraftRepository, get_draft_repository


class MongoDraftBackend(PersistenceBackend):
    """Persists each snapshot as the draft of one edit session."""

    def __init__(self, session_id: str, repository: Optional[DraftRepository] = None):
        self._session_id = session_id
        self._repository = repository or get_draft_repository()

    @property
    def session_id(self) -> str:
        return self._session_id

    async def persist(self, snapshot: Any) -> None:
        await self._repository.save_draft_async(self._session_id, snapshot)


def draft_backend_factory(repository: Optional[DraftRepository] = None):
    """Backend factory for ``EditSessionManager`` writing to the draft store."""

    def _factory(session_id: str) -> MongoDraftBackend:
        return MongoDraftBackend(session_id, repository)

    return _factory

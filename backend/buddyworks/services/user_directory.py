from typing import Any, Dict, List

from buddyworks.services.document_store import USERS, DocumentStore

REDACTED_FIELDS = {"password", "passwordHash", "hashedPassword", "token"}


class UserDirectory:
    def __init__(self, store: DocumentStore):
        self._store = store

    async def list_all(self) -> List[Dict[str, Any]]:
        users = await self._store.find(USERS)
        return [{key: value for key, value in user.items() if key not in REDACTED_FIELDS} for user in users]

import logging
from typing import Any, Dict, List, Optional

from buddyworks.auth import AuthenticatedIdentity, authorize_owner, authorize_self
from buddyworks.errors import NotFound
from buddyworks.services.document_store import SERVICES, DocumentStore

logger = logging.getLogger(__name__)

OWNER_FIELD = "serviceProviderEmail"
IMMUTABLE_FIELDS = ("_id", OWNER_FIELD)


class ServiceCatalog:
    """Services offered by providers; only the owning provider may change one."""

    def __init__(self, store: DocumentStore):
        self._store = store

    async def list_all(self) -> List[Dict[str, Any]]:
        return await self._store.find(SERVICES)

    async def list_by_provider(self, identity: AuthenticatedIdentity, email: Optional[str]) -> List[Dict[str, Any]]:
        authorize_self(identity, email)
        return await self._store.find(SERVICES, {OWNER_FIELD: email})

    async def get_by_id(self, service_id: str) -> Dict[str, Any]:
        service = await self._store.find_by_id(SERVICES, service_id)
        if service is None:
            raise NotFound("Service not found")
        return service

    async def create(self, identity: AuthenticatedIdentity, payload: Dict[str, Any]) -> str:
        document = {key: value for key, value in payload.items() if key != "_id"}
        if not document.get(OWNER_FIELD):
            document[OWNER_FIELD] = identity.email
        authorize_owner(identity, document[OWNER_FIELD])
        service_id = await self._store.insert_one(SERVICES, document)
        logger.info("Service %s created by %s", service_id, identity.email)
        return service_id

    async def update(self, identity: AuthenticatedIdentity, service_id: str, payload: Dict[str, Any]) -> bool:
        """Merge ``payload`` into the service. Returns False when nothing changed."""
        changes = {key: value for key, value in payload.items() if key not in IMMUTABLE_FIELDS}
        service = await self.get_by_id(service_id)
        authorize_owner(identity, service.get(OWNER_FIELD))
        modified = await self._store.update_by_id(SERVICES, service_id, changes)
        if not modified:
            return False
        logger.info("Service %s updated by %s", service_id, identity.email)
        return True

    async def delete(self, identity: AuthenticatedIdentity, service_id: str) -> None:
        service = await self.get_by_id(service_id)
        authorize_owner(identity, service.get(OWNER_FIELD))
        await self._store.delete_by_id(SERVICES, service_id)
        logger.info("Service %s deleted by %s", service_id, identity.email)

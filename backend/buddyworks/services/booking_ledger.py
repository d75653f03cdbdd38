import logging
from typing import Any, Dict, List, Optional

from buddyworks.auth import AuthenticatedIdentity, authorize_owner, authorize_self
from buddyworks.errors import BadRequest, NotFound
from buddyworks.services.document_store import BOOKINGS, DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "pending"


class BookingLedger:
    def __init__(self, store: DocumentStore):
        self._store = store

    async def create(self, identity: AuthenticatedIdentity, payload: Dict[str, Any]) -> str:
        document = {key: value for key, value in payload.items() if key != "_id"}
        if not document.get("userEmail"):
            document["userEmail"] = identity.email
        authorize_owner(identity, document["userEmail"])
        if not document.get("serviceStatus"):
            document["serviceStatus"] = DEFAULT_STATUS
        booking_id = await self._store.insert_one(BOOKINGS, document)
        logger.info("Booking %s created by %s", booking_id, identity.email)
        return booking_id

    async def list_by_user(self, identity: AuthenticatedIdentity, email: Optional[str]) -> List[Dict[str, Any]]:
        authorize_self(identity, email)
        return await self._store.find(BOOKINGS, {"userEmail": email})

    async def list_by_provider(self, identity: AuthenticatedIdentity, email: Optional[str]) -> List[Dict[str, Any]]:
        authorize_self(identity, email)
        return await self._store.find(BOOKINGS, {"providerEmail": email})

    async def update_status(
        self,
        identity: AuthenticatedIdentity,
        booking_id: str,
        new_status: Optional[Any],
    ) -> bool:
        """Set ``serviceStatus``. Returns False when the booking already had it."""
        if not isinstance(new_status, str) or not new_status.strip():
            raise BadRequest("Status is required")
        booking = await self._store.find_by_id(BOOKINGS, booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        authorize_owner(identity, booking.get("providerEmail"))
        modified = await self._store.update_by_id(BOOKINGS, booking_id, {"serviceStatus": new_status})
        if not modified:
            return False
        logger.info("Booking %s moved to %s by %s", booking_id, new_status, identity.email)
        return True

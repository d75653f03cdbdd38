from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from buddyworks.auth import AuthenticatedIdentity, require_identity
from buddyworks.dependencies import get_booking_ledger
from buddyworks.errors import MarketplaceError, raise_http_error
from buddyworks.models import (
    BookingCreated,
    BookingCreateRequest,
    MessageResponse,
    payload_fields,
)
from buddyworks.services.booking_ledger import BookingLedger

router = APIRouter(tags=["bookings"])


@router.post("/bookings", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: BookingCreateRequest,
    identity: AuthenticatedIdentity = Depends(require_identity),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    try:
        booking_id = await ledger.create(identity, payload_fields(request))
    except MarketplaceError as exc:
        raise_http_error(exc)
    return BookingCreated(insertedId=booking_id)


@router.get("/bookings/user", response_model=List[Dict[str, Any]])
async def list_user_bookings(
    email: Optional[str] = Query(default=None),
    identity: AuthenticatedIdentity = Depends(require_identity),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    try:
        return await ledger.list_by_user(identity, email)
    except MarketplaceError as exc:
        raise_http_error(exc)


@router.get("/provider-booked-services", response_model=List[Dict[str, Any]])
async def list_provider_bookings(
    email: Optional[str] = Query(default=None),
    identity: AuthenticatedIdentity = Depends(require_identity),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    try:
        return await ledger.list_by_provider(identity, email)
    except MarketplaceError as exc:
        raise_http_error(exc)


@router.patch("/provider-booked-services/{booking_id}", response_model=MessageResponse)
async def update_booking_status(
    booking_id: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    identity: AuthenticatedIdentity = Depends(require_identity),
    ledger: BookingLedger = Depends(get_booking_ledger),
):
    try:
        changed = await ledger.update_status(identity, booking_id, (payload or {}).get("serviceStatus"))
    except MarketplaceError as exc:
        raise_http_error(exc)
    if not changed:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED)
    return MessageResponse(message="Booking status updated successfully")

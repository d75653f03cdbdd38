"""
FastAPI dependencies.

Handlers are built per request over the store attached to ``app.state`` by
``create_app``.
"""

from fastapi import Depends, Request

from buddyworks.services.booking_ledger import BookingLedger
from buddyworks.services.document_store import DocumentStore
from buddyworks.services.service_catalog import ServiceCatalog
from buddyworks.services.user_directory import UserDirectory


def get_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_service_catalog(store: DocumentStore = Depends(get_store)) -> ServiceCatalog:
    return ServiceCatalog(store)


def get_booking_ledger(store: DocumentStore = Depends(get_store)) -> BookingLedger:
    return BookingLedger(store)


def get_user_directory(store: DocumentStore = Depends(get_store)) -> UserDirectory:
    return UserDirectory(store)

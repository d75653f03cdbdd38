import asyncio
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from buddyworks.auth import AuthenticatedIdentity
from buddyworks.errors import BadRequest, Forbidden, NotFound, StoreFailure
from buddyworks.services.booking_ledger import BookingLedger
from buddyworks.services.document_store import BOOKINGS, SERVICES, USERS, InMemoryDocumentStore
from buddyworks.services.service_catalog import ServiceCatalog
from buddyworks.services.user_directory import UserDirectory

ALICE = AuthenticatedIdentity(email="a@x.com")
BOB = AuthenticatedIdentity(email="b@x.com")


class FailingStore(InMemoryDocumentStore):
    async def find(self, collection, filter=None):
        raise StoreFailure(f"Failed to read {collection}", RuntimeError("connection reset"))


def test_service_lifecycle_enforces_ownership():
    async def scenario():
        catalog = ServiceCatalog(InMemoryDocumentStore())
        service_id = await catalog.create(ALICE, {"title": "wash"})

        with pytest.raises(Forbidden):
            await catalog.update(BOB, service_id, {"title": "mine now"})
        assert await catalog.update(ALICE, service_id, {"title": "wash+"}) is True
        assert await catalog.update(ALICE, service_id, {"title": "wash+"}) is False

        with pytest.raises(Forbidden):
            await catalog.delete(BOB, service_id)
        await catalog.delete(ALICE, service_id)
        with pytest.raises(NotFound):
            await catalog.get_by_id(service_id)
        with pytest.raises(NotFound):
            await catalog.update(ALICE, service_id, {"title": "ghost"})

    asyncio.run(scenario())


def test_service_update_ignores_owner_and_id_fields():
    async def scenario():
        catalog = ServiceCatalog(InMemoryDocumentStore())
        service_id = await catalog.create(ALICE, {"title": "wash", "serviceProviderEmail": ALICE.email})
        assert await catalog.update(ALICE, service_id, {"serviceProviderEmail": BOB.email, "_id": "x"}) is False
        stored = await catalog.get_by_id(service_id)
        assert stored["serviceProviderEmail"] == ALICE.email
        assert stored["_id"] == service_id

    asyncio.run(scenario())


def test_list_by_provider_returns_exact_set():
    async def scenario():
        catalog = ServiceCatalog(InMemoryDocumentStore())
        mine = {await catalog.create(ALICE, {"title": f"a{i}"}) for i in range(3)}
        await catalog.create(BOB, {"title": "b"})

        listed = await catalog.list_by_provider(ALICE, ALICE.email)
        assert {item["_id"] for item in listed} == mine
        assert len(await catalog.list_all()) == 4
        with pytest.raises(Forbidden):
            await catalog.list_by_provider(ALICE, BOB.email)

    asyncio.run(scenario())


def test_booking_status_only_by_provider():
    async def scenario():
        store = InMemoryDocumentStore()
        ledger = BookingLedger(store)
        booking_id = await ledger.create(BOB, {"serviceId": "s1", "providerEmail": ALICE.email})
        booking = await store.find_by_id(BOOKINGS, booking_id)
        assert booking["userEmail"] == BOB.email
        assert booking["serviceStatus"] == "pending"

        with pytest.raises(BadRequest):
            await ledger.update_status(ALICE, booking_id, None)
        with pytest.raises(BadRequest):
            await ledger.update_status(ALICE, booking_id, "  ")
        with pytest.raises(Forbidden):
            await ledger.update_status(BOB, booking_id, "completed")
        with pytest.raises(NotFound):
            await ledger.update_status(ALICE, "65f000000000000000000000", "completed")

        assert await ledger.update_status(ALICE, booking_id, "completed") is True
        assert await ledger.update_status(ALICE, booking_id, "completed") is False

    asyncio.run(scenario())


def test_booking_listings_scoped_by_role():
    async def scenario():
        ledger = BookingLedger(InMemoryDocumentStore())
        for_alice = await ledger.create(BOB, {"serviceId": "s1", "providerEmail": ALICE.email})
        await ledger.create(ALICE, {"serviceId": "s2", "providerEmail": BOB.email})

        as_user = await ledger.list_by_user(BOB, BOB.email)
        assert [item["_id"] for item in as_user] == [for_alice]
        as_provider = await ledger.list_by_provider(ALICE, ALICE.email)
        assert [item["_id"] for item in as_provider] == [for_alice]
        with pytest.raises(Forbidden):
            await ledger.list_by_user(BOB, ALICE.email)

    asyncio.run(scenario())


def test_user_directory_redacts_credentials():
    async def scenario():
        store = InMemoryDocumentStore()
        await store.insert_one(USERS, {"email": "a@x.com", "passwordHash": "x", "photo": "p.png"})
        users = await UserDirectory(store).list_all()
        assert users[0]["photo"] == "p.png"
        assert "passwordHash" not in users[0]

    asyncio.run(scenario())


def test_store_failure_surfaces_from_catalog():
    async def scenario():
        with pytest.raises(StoreFailure) as excinfo:
            await ServiceCatalog(FailingStore()).list_all()
        assert str(excinfo.value.cause) == "connection reset"

    asyncio.run(scenario())


def test_in_memory_store_semantics():
    async def scenario():
        store = InMemoryDocumentStore()
        doc_id = await store.insert_one(SERVICES, {"title": "wash", "tags": ["a"]})
        assert await store.find_by_id(SERVICES, "not-an-id") is None

        found = await store.find_by_id(SERVICES, doc_id)
        found["tags"].append("mutated")
        assert (await store.find_by_id(SERVICES, doc_id))["tags"] == ["a"]

        assert await store.update_by_id(SERVICES, doc_id, {"title": "wash"}) == 0
        assert await store.update_by_id(SERVICES, doc_id, {"price": 10}) == 1
        assert await store.update_by_id(SERVICES, "missing", {"price": 10}) == 0
        assert await store.find(SERVICES, {"price": 10}) == [{"_id": doc_id, "title": "wash", "tags": ["a"], "price": 10}]
        assert await store.delete_by_id(SERVICES, doc_id) == 1
        assert await store.delete_by_id(SERVICES, doc_id) == 0

    asyncio.run(scenario())


def test_booking_cannot_be_made_for_someone_else():
    async def scenario():
        store = InMemoryDocumentStore()
        ledger = BookingLedger(store)
        with pytest.raises(Forbidden):
            await ledger.create(BOB, {"serviceId": "s1", "userEmail": ALICE.email, "providerEmail": "p@x.com"})
        assert await store.find(BOOKINGS) == []

        booking_id = await ledger.create(BOB, {"serviceId": "s1", "userEmail": None, "providerEmail": ALICE.email})
        assert (await store.find_by_id(BOOKINGS, booking_id))["userEmail"] == BOB.email

    asyncio.run(scenario())


def test_status_must_be_text():
    async def scenario():
        ledger = BookingLedger(InMemoryDocumentStore())
        booking_id = await ledger.create(BOB, {"serviceId": "s1", "providerEmail": ALICE.email})
        with pytest.raises(BadRequest):
            await ledger.update_status(ALICE, booking_id, 3)

    asyncio.run(scenario())

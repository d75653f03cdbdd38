#!/usr/bin/env python3
import argparse
import asyncio
import json
import os
import sys
from typing import Any, Dict, List

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from buddyworks.services.document_store import SERVICES, USERS, DocumentStore, store_from_env

DEMO_USERS: List[Dict[str, Any]] = [
    {"email": "alex@buddyworks.dev", "name": "Alex Provider", "role": "provider"},
    {"email": "sam@buddyworks.dev", "name": "Sam Customer", "role": "user"},
]

DEMO_SERVICES: List[Dict[str, Any]] = [
    {
        "serviceProviderEmail": "alex@buddyworks.dev",
        "title": "Home deep clean",
        "description": "Three hour clean for apartments up to two bedrooms.",
        "price": 90,
        "area": "Dhaka",
    },
    {
        "serviceProviderEmail": "alex@buddyworks.dev",
        "title": "Car wash",
        "description": "Exterior wash and interior vacuum at your door.",
        "price": 25,
        "area": "Dhaka",
    },
]


async def seed(store: DocumentStore, with_services: bool) -> Dict[str, List[str]]:
    inserted: Dict[str, List[str]] = {USERS: [], SERVICES: []}
    await store.connect()
    try:
        existing = {user.get("email") for user in await store.find(USERS)}
        for user in DEMO_USERS:
            if user["email"] in existing:
                continue
            inserted[USERS].append(await store.insert_one(USERS, user))
        if with_services:
            for service in DEMO_SERVICES:
                inserted[SERVICES].append(await store.insert_one(SERVICES, service))
    finally:
        await store.close()
    return inserted


def main() -> int:
    parser = argparse.ArgumentParser(description="Insert demo users and services into the configured store.")
    parser.add_argument("--skip-services", action="store_true", help="Only insert demo users.")
    args = parser.parse_args()

    inserted = asyncio.run(seed(store_from_env(), with_services=not args.skip_services))
    print(json.dumps(inserted, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

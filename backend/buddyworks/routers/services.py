from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from buddyworks.auth import AuthenticatedIdentity, require_identity
from buddyworks.dependencies import get_service_catalog
from buddyworks.errors import MarketplaceError, raise_http_error
from buddyworks.models import InsertResult, MessageResponse, ServiceCreateRequest, payload_fields
from buddyworks.services.service_catalog import ServiceCatalog

router = APIRouter(tags=["services"])


@router.get("/services", response_model=List[Dict[str, Any]])
async def list_services(catalog: ServiceCatalog = Depends(get_service_catalog)):
    try:
        return await catalog.list_all()
    except MarketplaceError as exc:
        raise_http_error(exc)


@router.get("/my-services", response_model=List[Dict[str, Any]])
async def list_my_services(
    email: Optional[str] = Query(default=None),
    identity: AuthenticatedIdentity = Depends(require_identity),
    catalog: ServiceCatalog = Depends(get_service_catalog),
):
    try:
        return await catalog.list_by_provider(identity, email)
    except MarketplaceError as exc:
        raise_http_error(exc)


@router.get("/services/{service_id}", response_model=Dict[str, Any])
async def get_service(service_id: str, catalog: ServiceCatalog = Depends(get_service_catalog)):
    try:
        return await catalog.get_by_id(service_id)
    except MarketplaceError as exc:
        raise_http_error(exc)


@router.post("/services", response_model=InsertResult, status_code=status.HTTP_201_CREATED)
async def create_service(
    request: ServiceCreateRequest,
    identity: AuthenticatedIdentity = Depends(require_identity),
    catalog: ServiceCatalog = Depends(get_service_catalog),
):
    try:
        service_id = await catalog.create(identity, payload_fields(request))
    except MarketplaceError as exc:
        raise_http_error(exc)
    return InsertResult(insertedId=service_id)


@router.put("/services/{service_id}", response_model=MessageResponse)
async def update_service(
    service_id: str,
    payload: Dict[str, Any] = Body(...),
    identity: AuthenticatedIdentity = Depends(require_identity),
    catalog: ServiceCatalog = Depends(get_service_catalog),
):
    try:
        changed = await catalog.update(identity, service_id, payload)
    except MarketplaceError as exc:
        raise_http_error(exc)
    if not changed:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED)
    return MessageResponse(message="Service updated successfully")


@router.delete("/services/{service_id}", response_model=MessageResponse)
async def delete_service(
    service_id: str,
    identity: AuthenticatedIdentity = Depends(require_identity),
    catalog: ServiceCatalog = Depends(get_service_catalog),
):
    try:
        await catalog.delete(identity, service_id)
    except MarketplaceError as exc:
        raise_http_error(exc)
    return MessageResponse(message="Service deleted successfully")

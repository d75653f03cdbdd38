from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class AuthResult(BaseModel):
    success: bool = True


class ServiceCreateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    serviceProviderEmail: Optional[str] = None


class InsertResult(BaseModel):
    acknowledged: bool = True
    insertedId: str


class MessageResponse(BaseModel):
    message: str


class BookingCreateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    serviceId: Optional[str] = None
    userEmail: Optional[str] = None
    providerEmail: Optional[str] = None
    serviceStatus: Optional[str] = None


class BookingCreated(BaseModel):
    message: str = "Booking created"
    insertedId: str


class HealthResponse(BaseModel):
    status: str


def payload_fields(model: BaseModel) -> Dict[str, Any]:
    """Fields the client actually sent, including undeclared ones."""
    return {**model.model_dump(exclude_unset=True), **(model.model_extra or {})}

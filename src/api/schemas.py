"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from src.domain.enums import OfferStatus, RideStatus, Role


class VehiclePayload(BaseModel):
    model: str = Field(..., min_length=1, max_length=80)
    plate: str = Field(..., min_length=1, max_length=20)

    model_config = {"from_attributes": True}


# ── Requests ──────────────────────────────────────────────────────────


class AccountCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=255)
    role: Role
    phone: Optional[str] = Field(None, max_length=32)
    vehicle: Optional[VehiclePayload] = Field(
        None, description="Required when registering a driver."
    )


class LoginRequest(BaseModel):
    email: str
    role: Role


class BlockRequest(BaseModel):
    blocked: bool


class RideCreateRequest(BaseModel):
    origin: str = Field(..., min_length=1, max_length=200)
    destination: str = Field(..., min_length=1, max_length=200)
    offer_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class OfferCreateRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class MessageCreateRequest(BaseModel):
    text: str = Field(..., max_length=2000)


# ── Responses ─────────────────────────────────────────────────────────


class AccountResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    phone: Optional[str] = None
    vehicle: Optional[VehiclePayload] = None
    blocked: bool = False

    model_config = {"from_attributes": True}


class SessionResponse(BaseModel):
    account_id: str
    account: AccountResponse


class RideResponse(BaseModel):
    id: str
    requester_id: str
    requester_name: str
    origin: str
    destination: str
    offer_price: Decimal
    status: RideStatus
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    vehicle: Optional[VehiclePayload] = None
    final_price: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OfferResponse(BaseModel):
    id: str
    ride_id: str
    driver_id: str
    driver_name: str
    amount: Decimal
    vehicle: Optional[VehiclePayload] = None
    status: OfferStatus

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    id: str
    ride_id: str
    sender_id: str
    sender_name: str
    text: str
    timestamp: datetime
    is_system: bool = False

    model_config = {"from_attributes": True}


class StatsResponse(BaseModel):
    accounts: int
    passengers: int
    drivers: int
    blocked: int
    active_rides: int
    revenue: Decimal

    model_config = {"from_attributes": True}


class SweepResponse(BaseModel):
    purged: int


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    kind: str
    entity_id: Optional[str] = None

"""Company, supervisor, subscription and admin schemas."""


import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from workforce.common.constants import SubscriptionStatus, SupervisorStatus

PHONE_PATTERN = r"^\d{10}$"


# ═════════════════════════════════════════════════════════════════════
# Company
# ═════════════════════════════════════════════════════════════════════


class CompanySetupRequest(BaseModel):
    """First sign-in after e-mail verification: create company + owner."""

    company_name: str = Field(..., min_length=1, max_length=200)
    gst_no: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    owner_full_name: str = Field(..., min_length=1, max_length=150)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    gst_no: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    gst_no: Optional[str] = None
    address: Optional[str] = None
    subscription_plan: str
    subscription_end_date: Optional[date] = None
    subscription_status: SubscriptionStatus
    created_at: Optional[datetime] = None


class SubscriptionResponse(BaseModel):
    plan: str
    status: SubscriptionStatus
    end_date: Optional[date] = None
    is_active: bool
    days_remaining: Optional[int] = None
    show_reminder: bool = False


# ═════════════════════════════════════════════════════════════════════
# Supervisor
# ═════════════════════════════════════════════════════════════════════


class SupervisorInvite(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    aadhar: Optional[str] = Field(None, pattern=r"^\d{12}$")
    pan: Optional[str] = Field(None, pattern=r"^[A-Z]{5}[0-9]{4}[A-Z]$")
    address: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class SupervisorUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=150)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    aadhar: Optional[str] = Field(None, pattern=r"^\d{12}$")
    pan: Optional[str] = Field(None, pattern=r"^[A-Z]{5}[0-9]{4}[A-Z]$")
    address: Optional[str] = None
    status: Optional[SupervisorStatus] = None


class SupervisorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    company_id: uuid.UUID
    full_name: str
    email: str
    phone: Optional[str] = None
    aadhar: Optional[str] = None
    pan: Optional[str] = None
    address: Optional[str] = None
    status: SupervisorStatus
    is_linked: bool = False
    created_at: Optional[datetime] = None


class SupervisorProfile(SupervisorResponse):
    employee_count: int = 0


# ═════════════════════════════════════════════════════════════════════
# Platform admin
# ═════════════════════════════════════════════════════════════════════


class AdminCompanyItem(CompanyResponse):
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    employee_count: int = 0
    supervisor_count: int = 0


class SubscriptionUpdate(BaseModel):
    """Change a company's plan; ``extend_days`` is added to the current end date."""

    plan: Optional[str] = Field(None, max_length=50)
    end_date: Optional[date] = None
    extend_days: Optional[int] = Field(None, ge=1, le=3660)
    status: Optional[SubscriptionStatus] = None

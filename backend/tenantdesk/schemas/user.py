from pydantic import AfterValidator, EmailStr, Field
from typing import Annotated, Optional
from datetime import datetime
from .base import ApiModel


def _normalize_email(value: str) -> str:
    return value.strip().lower()


# Emails are stored and compared lower-cased
NormalizedEmail = Annotated[EmailStr, AfterValidator(_normalize_email)]


class Role(ApiModel):
    id: str
    name: str


class Tenant(ApiModel):
    id: str
    name: str


class UserBase(ApiModel):
    name: Optional[str] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    role_id: Optional[str] = None
    tenant_id: Optional[str] = None


class UserCreate(UserBase):
    email: NormalizedEmail
    password: str = Field(min_length=1)


class UserUpdate(UserBase):
    email: Optional[NormalizedEmail] = None


class User(UserBase):
    id: str
    email: str
    role: Optional[Role] = None
    tenant: Optional[Tenant] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

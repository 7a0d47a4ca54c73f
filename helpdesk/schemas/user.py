from __future__ import annotations

from pydantic import Field, field_validator

from .common import InstantOut, Payload, ReadModel

ROLES = ("Incharge", "Supervisor", "Super Admin", "IT", "Management", "Admin")


class UserCreate(Payload):
    full_name: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=255)
    username: str = Field(min_length=1, max_length=64)
    role: str
    department: str | None = None
    mobile_number: str | None = None
    cnic: str | None = None
    status: str = "active"

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value.lower()

    @field_validator("role")
    @classmethod
    def _validate_role(cls, value: str) -> str:
        for role in ROLES:
            if role.lower() == value.lower():
                return role
        raise ValueError(f"role '{value}' is not supported")

    @field_validator("status")
    @classmethod
    def _validate_status(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"active", "inactive"}:
            raise ValueError("status must be 'active' or 'inactive'")
        return normalized


class UserRead(ReadModel):
    id: str
    full_name: str
    email: str
    username: str
    role: str
    department: str | None = None
    mobile_number: str | None = None
    status: str
    created_at: InstantOut

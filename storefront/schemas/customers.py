"""Customer schemas."""

from typing import Optional

from pydantic import Field, field_validator

from storefront.schemas.common import CamelModel, CamelResponse


def _validate_email(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    if "@" not in v or "." not in v.split("@")[-1]:
        raise ValueError("Invalid email format")
    return v.lower()


class CustomerCreateRequest(CamelModel):
    """Request schema for creating a customer."""

    name: str = Field(..., min_length=1, max_length=255, description="Customer name")
    email: Optional[str] = Field(None, max_length=255, description="Email address")
    phone: Optional[str] = Field(None, max_length=32, description="Phone number")
    address: Optional[str] = Field(None, description="Postal address")

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        """Validate email format."""
        return _validate_email(v)


class CustomerUpdateRequest(CamelModel):
    """Partial customer update; omitted fields keep their current value."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        return _validate_email(v)

    @field_validator("name")
    @classmethod
    def reject_null_name(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Name cannot be null")
        return v


class CustomerResponse(CamelResponse):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

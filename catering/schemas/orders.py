from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from catering.services.delivery_dates import parse_date_needed


class FoodSelectionLine(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    menu_item_id: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(..., ge=1, le=100)
    notes: Optional[str] = Field(default=None, max_length=500)


class OrderCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    customer_name: str = Field(..., min_length=2, max_length=100)
    customer_email: EmailStr
    address: str = Field(..., min_length=10, max_length=500)
    food_selection: List[FoodSelectionLine] = Field(..., min_length=1)
    date_needed: str
    notes: Optional[str] = Field(default=None, max_length=1000)
    promo_code: Optional[str] = Field(default=None, max_length=64)

    @field_validator("date_needed")
    @classmethod
    def validate_date_format(cls, value: str) -> str:
        # the cutoff depends on Settings and is checked by the route
        try:
            return parse_date_needed(value).isoformat()
        except ValueError as exc:
            raise ValueError("date_needed must be an ISO date (YYYY-MM-DD)") from exc


class ValidatePromoPayload(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class ApprovePayload(BaseModel):
    approval_message: str = Field(..., min_length=10, max_length=1000)


class DenyPayload(BaseModel):
    admin_reason: str = Field(..., min_length=10, max_length=1000)


class ConfirmInvoicePayload(BaseModel):
    total_price_cents: Optional[int] = Field(default=None, ge=0)


class CateringInterestPayload(BaseModel):
    email: EmailStr

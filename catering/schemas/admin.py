from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

MENU_ITEM_ID_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
PROMO_CODE_PATTERN = r"^[A-Za-z0-9_-]+$"


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AdminLoginPayload(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class MenuItemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1, max_length=100, pattern=MENU_ITEM_ID_PATTERN)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    price_cents: int = Field(..., ge=0)
    category: str = Field(default="meals", min_length=1, max_length=50)
    serves: Optional[int] = Field(default=None, ge=1)
    display_order: int = 0
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    price_cents: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    serves: Optional[int] = Field(default=None, ge=1)
    display_order: Optional[int] = None
    is_available: Optional[bool] = None


class PromoCodeCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    code: str = Field(..., min_length=1, max_length=64, pattern=PROMO_CODE_PATTERN)
    description: Optional[str] = Field(default=None, max_length=500)
    discount_percent: int = Field(..., ge=1, le=100)
    max_uses: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_window(self):
        if self.valid_from and self.valid_until and _as_utc(self.valid_until) <= _as_utc(self.valid_from):
            raise ValueError("valid_until must be after valid_from")
        return self


class PromoCodeUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    code: Optional[str] = Field(default=None, min_length=1, max_length=64, pattern=PROMO_CODE_PATTERN)
    description: Optional[str] = Field(default=None, max_length=500)
    discount_percent: Optional[int] = Field(default=None, ge=1, le=100)
    max_uses: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.valid_from and self.valid_until and _as_utc(self.valid_until) <= _as_utc(self.valid_from):
            raise ValueError("valid_until must be after valid_from")
        return self

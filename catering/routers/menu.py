from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from catering.core.database import get_db
from catering.services.menu import list_available_menu_items, menu_item_to_dict

router = APIRouter(prefix="/api/menu", tags=["menu"])


@router.get("")
def public_menu(db: Session = Depends(get_db)):
    return {"menuItems": [menu_item_to_dict(item) for item in list_available_menu_items(db)]}

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from catering.core.database import get_db
from catering.deps import require_admin
from catering.schemas.admin import MenuItemCreate, MenuItemUpdate
from catering.services import menu as menu_service

router = APIRouter(prefix="/api/admin/menu", tags=["admin-menu"])


@router.get("")
def list_menu_items(db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    return {"menuItems": [menu_service.menu_item_to_dict(item) for item in menu_service.list_menu_items(db)]}


@router.get("/{menu_item_id}")
def get_menu_item(menu_item_id: str, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    return {"menuItem": menu_service.menu_item_to_dict(menu_service.get_menu_item(db, menu_item_id))}


@router.post("", status_code=201)
def create_menu_item(payload: MenuItemCreate, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    item = menu_service.create_menu_item(db, payload.model_dump())
    return {"message": "Menu item created successfully", "menuItem": menu_service.menu_item_to_dict(item)}


@router.put("/{menu_item_id}")
def update_menu_item(
    menu_item_id: str,
    payload: MenuItemUpdate,
    db: Session = Depends(get_db),
    _admin: str = Depends(require_admin),
):
    item = menu_service.update_menu_item(db, menu_item_id, payload.model_dump(exclude_unset=True))
    return {"message": "Menu item updated successfully", "menuItem": menu_service.menu_item_to_dict(item)}


@router.delete("/{menu_item_id}")
def delete_menu_item(menu_item_id: str, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    menu_service.delete_menu_item(db, menu_item_id)
    return {"message": "Menu item deleted successfully"}

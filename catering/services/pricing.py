from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional, Union

from catering.models.menu_item import MenuItem

MenuLookup = Union[Mapping[str, Any], Callable[[str], Optional[Any]]]


def _line_value(line: Any, key: str, default: Any = None) -> Any:
    if isinstance(line, Mapping):
        return line.get(key, default)
    return getattr(line, key, default)


def resolve_menu_item(lookup: MenuLookup, menu_item_id: str):
    if isinstance(lookup, Mapping):
        return lookup.get(menu_item_id)
    return lookup(menu_item_id)


def calculate_total_price(selection: Iterable[Any], lookup: MenuLookup) -> int:
    """Sum unit price x quantity for every line whose menu item still resolves.

    Lines pointing at unknown (removed or renamed) items contribute zero.
    """
    total = 0
    for line in selection or []:
        menu_item = resolve_menu_item(lookup, str(_line_value(line, "menu_item_id", "")))
        if menu_item is None:
            continue
        unit_price_cents = int(_line_value(menu_item, "price_cents", 0) or 0)
        quantity = int(_line_value(line, "quantity", 0) or 0)
        total += unit_price_cents * quantity
    return total


def apply_discount(original_cents: int, discount_percent: int | None) -> int:
    """round(original * (100 - pct) / 100), half-up, on exact integers."""
    if not discount_percent:
        return original_cents
    if not 1 <= int(discount_percent) <= 100:
        raise ValueError("discount_percent must be between 1 and 100")
    return (int(original_cents) * (100 - int(discount_percent)) + 50) // 100


def menu_lookup_from_items(items: Iterable[MenuItem]) -> dict[str, MenuItem]:
    return {item.id: item for item in items}


def format_price(cents: int | None) -> str:
    return f"${(int(cents or 0)) / 100:,.2f}"

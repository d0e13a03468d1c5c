from __future__ import annotations


class CateringError(Exception):
    """Base for domain errors that map onto an HTTP status at the API boundary."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderNotFoundError(CateringError):
    status_code = 404

    def __init__(self, order_id: str):
        super().__init__("Order not found")
        self.order_id = order_id


class PromoCodeNotFoundError(CateringError):
    status_code = 404

    def __init__(self, promo_code_id: str):
        super().__init__("Promo code not found")
        self.promo_code_id = promo_code_id


class MenuItemNotFoundError(CateringError):
    status_code = 404

    def __init__(self, menu_item_id: str):
        super().__init__("Menu item not found")
        self.menu_item_id = menu_item_id


class InvalidOrderStatusError(CateringError):
    status_code = 409

    def __init__(self, message: str, *, current_status: str):
        super().__init__(message)
        self.current_status = current_status


class PromoCodeRejectedError(CateringError):
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidPromoWindowError(CateringError):
    status_code = 400

    def __init__(self):
        super().__init__("valid_until must be after valid_from")


class DuplicatePromoCodeError(CateringError):
    status_code = 409

    def __init__(self):
        super().__init__("A promo code with this code already exists")


class DuplicateMenuItemError(CateringError):
    status_code = 409

    def __init__(self, menu_item_id: str):
        super().__init__(f"A menu item with id {menu_item_id} already exists")
        self.menu_item_id = menu_item_id


class PaymentProviderError(CateringError):
    status_code = 502


class PersistenceError(CateringError):
    status_code = 500


class NotificationError(RuntimeError):
    def __init__(self, template: str, recipient: str, cause: Exception | None = None):
        super().__init__(f"Failed to send {template} email to {recipient}: {cause}")
        self.template = template
        self.recipient = recipient
        self.cause = cause

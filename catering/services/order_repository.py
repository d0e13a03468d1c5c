from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import desc, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catering.core.errors import InvalidOrderStatusError, OrderNotFoundError, PersistenceError
from catering.models.order import Order

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"id", "created_at", "discount_percent", "promo_code_id"}


class OrderRepository:
    """SQLAlchemy-backed storage for orders.

    Not-found is reported as OrderNotFoundError, every other database failure as
    PersistenceError with the operation in the message.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert(self, order: Order) -> Order:
        try:
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Database error creating order")
            raise PersistenceError(f"Failed to create order: {exc}") from exc
        return order

    def get_by_id(self, order_id: str) -> Order:
        try:
            order = self.db.get(Order, order_id, populate_existing=True)
        except SQLAlchemyError as exc:
            logger.exception("Database error fetching order id=%s", order_id)
            raise PersistenceError(f"Failed to fetch order: {exc}") from exc
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def list(self, status: Optional[str] = None) -> list[Order]:
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        try:
            return query.order_by(desc(Order.created_at)).all()
        except SQLAlchemyError as exc:
            logger.exception("Database error fetching orders status=%s", status)
            raise PersistenceError(f"Failed to fetch orders: {exc}") from exc

    def update(
        self,
        order_id: str,
        fields: dict[str, Any],
        *,
        expected_status: Optional[str] = None,
    ) -> Order:
        """Merge fields into the stored row and return the fresh order.

        With expected_status the write only lands while the row still has that
        status (compare-and-swap); otherwise the current status is reported as
        an InvalidOrderStatusError.
        """
        blocked = _IMMUTABLE_FIELDS.intersection(fields)
        if blocked:
            raise ValueError(f"Immutable order fields: {', '.join(sorted(blocked))}")

        values = dict(fields)
        values["updated_at"] = datetime.now(timezone.utc)
        statement = update(Order).where(Order.id == order_id)
        if expected_status is not None:
            statement = statement.where(Order.status == expected_status)

        try:
            result = self.db.execute(statement.values(**values).execution_options(synchronize_session=False))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Database error updating order id=%s", order_id)
            raise PersistenceError(f"Failed to update order: {exc}") from exc

        if not result.rowcount:
            current = self.get_by_id(order_id)
            raise InvalidOrderStatusError(
                f"Order is already {current.status}",
                current_status=current.status,
            )
        return self.get_by_id(order_id)

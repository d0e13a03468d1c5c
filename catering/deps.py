from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from catering.core.config import Settings, load_settings
from catering.core.database import SessionLocal, get_db
from catering.core.request_context import set_request_context
from catering.integrations.email import EmailSender, build_email_sender
from catering.integrations.payments import PaymentLinkProvider, build_payment_provider
from catering.services.auth import decode_admin_token
from catering.services.notifications import NotificationDispatcher, OrderNotifier
from catering.services.order_lifecycle import OrderLifecycleEngine

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_email_sender: Optional[EmailSender] = None
_payment_provider: Optional[PaymentLinkProvider] = None
_dispatcher: Optional[NotificationDispatcher] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def get_email_sender(settings: Settings = Depends(get_settings)) -> EmailSender:
    global _email_sender
    if _email_sender is None:
        _email_sender = build_email_sender(settings.email_provider, resend_api_key=settings.resend_api_key)
    return _email_sender


def get_payment_provider(settings: Settings = Depends(get_settings)) -> PaymentLinkProvider:
    global _payment_provider
    if _payment_provider is None:
        _payment_provider = build_payment_provider(
            settings.payment_provider,
            stripe_secret_key=settings.stripe_secret_key,
            business_name=settings.business_name,
            currency=settings.currency,
            days_until_due=settings.invoice_days_until_due,
            frontend_url=settings.frontend_url,
        )
    return _payment_provider


def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher


def get_session_factory() -> Callable[[], Session]:
    return SessionLocal


def get_notifier(
    settings: Settings = Depends(get_settings),
    sender: EmailSender = Depends(get_email_sender),
) -> OrderNotifier:
    return OrderNotifier(sender, settings)


def get_lifecycle_engine(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    payment_provider: PaymentLinkProvider = Depends(get_payment_provider),
    notifier: OrderNotifier = Depends(get_notifier),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> OrderLifecycleEngine:
    return OrderLifecycleEngine(
        db,
        settings,
        payment_provider=payment_provider,
        notifier=notifier,
        dispatcher=dispatcher,
        session_factory=session_factory,
    )


def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    """Validate the bearer JWT and return the admin email."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_admin_token(credentials.credentials, settings)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    email = str(payload.get("email") or payload.get("sub") or "").lower()
    if email != settings.admin_email:
        logger.warning("Rejected token for unknown admin %s", email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.admin_email = email
    set_request_context(admin_email=email)
    return email

"""Shared data and builders for the backend test scenarios."""

from concurrent.futures import Executor, Future

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catering.core.config import Settings
from catering.core.database import Base, get_db
from catering.core.error_handlers import register_error_handlers
from catering.core.errors import PaymentProviderError
from catering.deps import get_dispatcher, get_email_sender, get_payment_provider, get_session_factory, get_settings
from catering.integrations.email import LoggingEmailSender
from catering.integrations.payments import MockPaymentProvider
from catering.services.auth import create_admin_token
from catering.services.menu import seed_default_menu
from catering.services.notifications import NotificationDispatcher, OrderNotifier
from catering.services.order_lifecycle import OrderLifecycleEngine
import catering.models  # noqa: F401

TEST_SETTINGS = Settings(
    env="test",
    business_name="Gio's Corner",
    owner_email="owner@example.com",
    from_email="orders@example.com",
    catering_email="catering@example.com",
    admin_email="admin@example.com",
    jwt_secret="test-secret",
    email_provider="log",
    payment_provider="mock",
    stripe_webhook_secret="whsec_test",
)

HAPPY_PATH_ORDER = {
    "customer_name": "Sarah Johnson",
    "customer_email": "sarah.johnson@example.com",
    "address": "123 Main Street, Springfield, IL 62701",
    "food_selection": [{"menu_item_id": "family-dinner-meal", "quantity": 2, "notes": "No nuts please"}],
    "date_needed": "2099-06-01",
    "notes": "Birthday party, please arrive by 5 PM.",
}

APPROVAL_MESSAGE = "We can deliver at 4:30 PM on the day."
DENIAL_REASON = "We are fully booked for that date, sorry."


class InlineExecutor(Executor):
    """Runs submitted work immediately so detached tasks finish inside the test."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class FailingPaymentProvider:
    def __init__(self):
        self.calls = 0

    def create_payment_link(self, request):
        self.calls += 1
        raise PaymentProviderError("Failed to create Stripe invoice: card_declined")


class FailingEmailSender:
    def __init__(self):
        self.attempts = []

    def send(self, message):
        self.attempts.append(message)
        raise RuntimeError("Resend error 500: upstream unavailable")


def build_session_factory(*, seed_menu: bool = True) -> sessionmaker:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    if seed_menu:
        db = testing_session_local()
        seed_default_menu(db)
        db.close()
    return testing_session_local


def build_engine(
    db,
    session_factory,
    *,
    payment_provider=None,
    sender=None,
    on_error=None,
    clock=None,
    settings=TEST_SETTINGS,
) -> OrderLifecycleEngine:
    return OrderLifecycleEngine(
        db,
        settings,
        payment_provider=payment_provider or MockPaymentProvider(),
        notifier=OrderNotifier(sender or LoggingEmailSender(), settings),
        dispatcher=NotificationDispatcher(executor=InlineExecutor(), on_error=on_error),
        session_factory=session_factory,
        clock=clock,
    )


def build_client(*routers, session_factory=None, payment_provider=None, sender=None, settings=TEST_SETTINGS):
    """FastAPI app with the given routers, the API error envelope and test dependencies."""
    session_factory = session_factory or build_session_factory()
    app = FastAPI()
    register_error_handlers(app, expose_errors=settings.is_dev)
    for router in routers:
        app.include_router(router)

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    dispatcher = NotificationDispatcher(executor=InlineExecutor())
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_payment_provider] = lambda: payment_provider or MockPaymentProvider()
    app.dependency_overrides[get_email_sender] = lambda: sender or LoggingEmailSender()
    return TestClient(app)


def admin_headers(settings=TEST_SETTINGS):
    return {"Authorization": f"Bearer {create_admin_token(settings.admin_email, settings)}"}

import os
import tempfile
from datetime import datetime, timedelta, timezone

_TEST_DIR = tempfile.mkdtemp(prefix="marketplace-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'api.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENV"] = "test"
os.environ["LOG_FILE"] = ""

import pytest
from sqlalchemy.orm import sessionmaker

from marketplace.database import Base, build_engine
from marketplace.models.booking_model import Booking
from marketplace.models.service_model import Service
from marketplace.models.user_model import User
from marketplace.schemas.booking_schema import BookingResponse, BookingStatus
from marketplace.schemas.service_schema import ProviderSummary, ServiceResponse
from marketplace.services.booking_events import BookingEventBus
from marketplace.services.booking_guard import BookingGuard
from marketplace.services.booking_history import BookingHistory
from marketplace.services.booking_service import BookingService
from marketplace.services.listing_composer import ListingComposer
from marketplace.services.listing_store import ListingStore, SqlListingStore
from marketplace.services.query_cache import QueryCache

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_service(service_id, provider_id, category="Cleaning", city="Pune", is_active=True, price=500.0):
    return ServiceResponse(
        id=service_id,
        title=f"{category} by {provider_id}",
        description=None,
        price=price,
        category=category,
        city=city,
        is_active=is_active,
        provider_id=provider_id,
        created_at=BASE_TIME,
    )


class InMemoryStore(ListingStore):
    """Store double that records calls and can be told to fail."""

    def __init__(self):
        self.services = []
        self.providers = []
        self.bookings = []
        self.calls = []
        self.failures = {}

    def _enter(self, operation):
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    async def fetch_services(self, listing_filter):
        self._enter("fetch_services")
        return [
            service for service in self.services
            if service.is_active
            and (not listing_filter.category or service.category.lower() == listing_filter.category.lower())
            and (not listing_filter.city or service.city == listing_filter.city)
        ]

    async def fetch_providers(self, ids):
        self._enter("fetch_providers")
        self.last_provider_ids = set(ids)
        return [provider for provider in self.providers if provider.id in ids]

    async def fetch_bookings(self, service_id, customer_id, status_in):
        self._enter("fetch_bookings")
        statuses = {BookingStatus(status) for status in status_in}
        return [
            booking for booking in self.bookings
            if booking.service_id == service_id
            and booking.customer_id == customer_id
            and booking.status in statuses
        ]

    async def insert_booking(self, draft):
        self._enter("insert_booking")
        booking = BookingResponse(
            id=f"B{len(self.bookings) + 1}",
            service_id=draft.service_id,
            customer_id=draft.customer_id,
            provider_id=draft.provider_id,
            status=draft.status,
            booking_date=draft.booking_date,
            created_at=datetime.now(timezone.utc),
        )
        self.bookings.append(booking)
        return booking

    async def fetch_service(self, service_id):
        self._enter("fetch_service")
        return next((service for service in self.services if service.id == service_id), None)

    async def fetch_customer_bookings(self, customer_id):
        self._enter("fetch_customer_bookings")
        return [booking for booking in self.bookings if booking.customer_id == customer_id]

    def add_booking(self, service_id, customer_id, provider_id, status=BookingStatus.pending):
        booking = BookingResponse(
            id=f"B{len(self.bookings) + 1}",
            service_id=service_id,
            customer_id=customer_id,
            provider_id=provider_id,
            status=status,
            booking_date=BASE_TIME,
            created_at=BASE_TIME,
        )
        self.bookings.append(booking)
        return booking


@pytest.fixture
def memory_store():
    store = InMemoryStore()
    store.services.append(make_service("S1", "P1"))
    store.providers.append(ProviderSummary(id="P1", display_name="Asha"))
    return store


@pytest.fixture
def events():
    return BookingEventBus()


@pytest.fixture
def composer(memory_store):
    return ListingComposer(memory_store)


@pytest.fixture
def guard(memory_store):
    return BookingGuard(memory_store)


@pytest.fixture
def bookings(memory_store, guard, events):
    return BookingService(memory_store, guard, events)


@pytest.fixture
def history(memory_store, events):
    return BookingHistory(memory_store, QueryCache(), events)


# SQL-backed fixtures


class Seeder:
    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._tick = 0

    def _next_time(self):
        self._tick += 1
        return BASE_TIME + timedelta(minutes=self._tick)

    def profile(self, profile_id, full_name):
        with self.session_factory() as db:
            db.add(User(
                id=profile_id,
                full_name=full_name,
                email=f"{profile_id.lower()}@example.com",
                password_hash="not-a-real-hash",
            ))
            db.commit()

    def service(self, service_id, provider_id, category="Cleaning", city="Pune", is_active=True):
        with self.session_factory() as db:
            db.add(Service(
                id=service_id,
                title=f"{category} in {city}",
                price=750,
                category=category,
                city=city,
                is_active=is_active,
                provider_id=provider_id,
                created_at=self._next_time(),
            ))
            db.commit()

    def booking(self, service_id, customer_id, provider_id, status="pending"):
        with self.session_factory() as db:
            db.add(Booking(
                service_id=service_id,
                customer_id=customer_id,
                provider_id=provider_id,
                status=status,
                created_at=self._next_time(),
            ))
            db.commit()


@pytest.fixture
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    return SqlListingStore(session_factory, timeout=5)


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)

import asyncio
import time

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from marketplace.database import build_engine
from marketplace.models.booking_model import Booking
from marketplace.schemas.booking_schema import ACTIVE_BOOKING_STATUSES, BookingDraft, BookingStatus
from marketplace.schemas.result_schema import ErrorKind
from marketplace.schemas.service_schema import ListingFilter, ProviderSummary
from marketplace.services.booking_events import BookingEventBus
from marketplace.services.booking_guard import BookingGuard
from marketplace.services.booking_service import BookingService
from marketplace.services.listing_composer import ListingComposer
from marketplace.services.listing_store import (
    SqlListingStore,
    StoreConflictError,
    StoreFetchError,
    StoreInsertError,
    StoreTimeoutError,
    _is_active_booking_violation,
)


@pytest.fixture
def catalogue(seed):
    seed.profile("P1", "Asha")
    seed.service("S1", "P1", category="Cleaning", city="Pune")
    seed.service("S2", "P1", category="Window Cleaning", city="Pune")
    seed.service("S3", "P2", category="Gardening", city="Pune")
    seed.service("S4", "P2", category="cleaning", city="Mumbai")
    seed.service("S5", "P1", category="Cleaning", city="Pune", is_active=False)


def _ids(services):
    return [service.id for service in services]


def test_category_is_case_insensitive_equality(sql_store, catalogue):
    assert _ids(asyncio.run(sql_store.fetch_services(ListingFilter(category="CLEANING")))) == ["S1", "S4"]
    assert _ids(asyncio.run(sql_store.fetch_services(ListingFilter(category="lean")))) == []


def test_city_is_exact(sql_store, catalogue):
    services = asyncio.run(sql_store.fetch_services(ListingFilter(category="cleaning", city="Pune")))
    assert _ids(services) == ["S1"]
    assert asyncio.run(sql_store.fetch_services(ListingFilter(city="pune"))) == []


def test_like_wildcards_are_literal(sql_store, catalogue):
    assert asyncio.run(sql_store.fetch_services(ListingFilter(category="%"))) == []
    assert asyncio.run(sql_store.fetch_services(ListingFilter(category="Clean_ng"))) == []


def test_no_filter_returns_active_services_in_store_order(sql_store, catalogue):
    assert _ids(asyncio.run(sql_store.fetch_services(ListingFilter()))) == ["S1", "S2", "S3", "S4"]


def test_fetch_providers_returns_only_matches(sql_store, catalogue):
    providers = asyncio.run(sql_store.fetch_providers({"P1", "P404"}))

    assert providers == [ProviderSummary(id="P1", display_name="Asha")]
    assert asyncio.run(sql_store.fetch_providers(set())) == []


def test_fetch_bookings_filters_status(sql_store, seed, catalogue):
    seed.booking("S1", "C9", "P1", status="rejected")
    seed.booking("S1", "C9", "P1", status="accepted")
    seed.booking("S2", "C9", "P1", status="pending")

    active = asyncio.run(sql_store.fetch_bookings("S1", "C9", ACTIVE_BOOKING_STATUSES))

    assert [booking.status for booking in active] == [BookingStatus.accepted]


def test_unique_index_rejects_second_active_booking(sql_store, catalogue):
    draft = BookingDraft(service_id="S1", customer_id="C9", provider_id="P1")
    booking = asyncio.run(sql_store.insert_booking(draft))

    assert booking.status == BookingStatus.pending
    with pytest.raises(StoreConflictError):
        asyncio.run(sql_store.insert_booking(draft))


def test_finished_booking_does_not_hold_the_index(sql_store, seed, catalogue):
    seed.booking("S1", "C9", "P1", status="completed")
    seed.booking("S1", "C9", "P1", status="rejected")

    booking = asyncio.run(sql_store.insert_booking(
        BookingDraft(service_id="S1", customer_id="C9", provider_id="P1")
    ))

    assert booking.customer_id == "C9"


def test_customer_bookings_newest_first(sql_store, seed, catalogue):
    seed.booking("S1", "C9", "P1", status="completed")
    seed.booking("S3", "C9", "P2")
    seed.booking("S3", "C1", "P2")

    bookings = asyncio.run(sql_store.fetch_customer_bookings("C9"))

    assert [booking.service_id for booking in bookings] == ["S3", "S1"]


def test_database_errors_become_store_errors(tmp_path):
    # No tables were created in this database
    engine = build_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    store = SqlListingStore(sessionmaker(bind=engine), timeout=5)

    with pytest.raises(StoreFetchError):
        asyncio.run(store.fetch_services(ListingFilter()))
    with pytest.raises(StoreInsertError) as excinfo:
        asyncio.run(store.insert_booking(BookingDraft(service_id="S1", customer_id="C9", provider_id="P1")))
    assert not isinstance(excinfo.value, StoreConflictError)
    engine.dispose()


class SlowStore(SqlListingStore):
    def _query_services(self, listing_filter):
        time.sleep(0.3)
        return super()._query_services(listing_filter)


def test_slow_fetch_times_out(session_factory, catalogue):
    store = SlowStore(session_factory, timeout=0.05)

    with pytest.raises(StoreTimeoutError):
        asyncio.run(store.fetch_services(ListingFilter()))

    result = asyncio.run(ListingComposer(store).query())
    assert result.error.kind == ErrorKind.timeout


class StaleReadStore(SqlListingStore):
    """Sees no existing bookings, as a request racing another would."""

    async def fetch_bookings(self, service_id, customer_id, status_in):
        return []


def test_racing_requests_are_stopped_by_the_index(session_factory, catalogue):
    store = StaleReadStore(session_factory, timeout=5)
    service = BookingService(store, BookingGuard(store), BookingEventBus())

    first = asyncio.run(service.request_booking("S1", "C9", "P1"))
    second = asyncio.run(service.request_booking("S1", "C9", "P1"))

    assert first.ok
    assert second.error.kind == ErrorKind.already_booked
    with session_factory() as db:
        assert db.query(Booking).filter(Booking.customer_id == "C9").count() == 1


def test_listing_composition_over_sql(sql_store, catalogue):
    result = asyncio.run(ListingComposer(sql_store).query(ListingFilter(category="cleaning", city="Pune")))

    assert result.ok
    assert [(listing.id, listing.provider.display_name) for listing in result.data] == [("S1", "Asha")]


def test_listing_without_provider_profile(sql_store, catalogue):
    result = asyncio.run(ListingComposer(sql_store).query(ListingFilter(category="Gardening")))

    assert [listing.provider for listing in result.data] == [None]


def _integrity_error(message):
    return IntegrityError("INSERT INTO bookings ...", {}, Exception(message))


def test_only_the_active_booking_index_counts_as_a_conflict():
    assert _is_active_booking_violation(
        _integrity_error("UNIQUE constraint failed: bookings.service_id, bookings.customer_id")
    )
    assert _is_active_booking_violation(
        _integrity_error('duplicate key value violates unique constraint "uq_bookings_active_service_customer"')
    )
    assert not _is_active_booking_violation(_integrity_error("UNIQUE constraint failed: bookings.id"))
    assert not _is_active_booking_violation(
        _integrity_error('duplicate key value violates unique constraint "bookings_pkey"')
    )

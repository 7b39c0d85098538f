"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import Callable, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.inmemory import InMemoryTripRepository
from tripcalc.app.db.models import Base
from tripcalc.app.models import (
    GeoLocation,
    ItemCategory,
    ItineraryItem,
    LocationCategory,
    SavedLocation,
    TimeSlot,
)
from tripcalc.app.planner.ids import SequentialIdGenerator


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(org_id=uuid.uuid4(), user_id=uuid.uuid4())


@pytest.fixture
def other_ctx() -> RequestContext:
    return RequestContext(org_id=uuid.uuid4(), user_id=uuid.uuid4())


@pytest.fixture
def ids() -> SequentialIdGenerator:
    return SequentialIdGenerator("gen")


@pytest.fixture
def repo() -> InMemoryTripRepository:
    return InMemoryTripRepository()


@pytest.fixture
def sqlite_session() -> Generator[Session, None, None]:
    """In-memory SQLite session with the full schema created.

    StaticPool keeps the single in-memory database alive across connections.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    with Session(engine, expire_on_commit=False) as session:
        yield session

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def make_item() -> Callable[..., ItineraryItem]:
    """Factory for manual itinerary items."""

    def _make(
        item_id: str,
        category: ItemCategory = ItemCategory.ACTIVITIES,
        amount: int = 0,
        visits: int = 1,
        start_time: str | None = None,
        name: str = "",
    ) -> ItineraryItem:
        return ItineraryItem(
            id=item_id,
            name=name or item_id,
            category=category,
            amount=amount,
            visits=visits,
            time_slot=TimeSlot(start_time=start_time) if start_time else None,
        )

    return _make


@pytest.fixture
def hotel() -> SavedLocation:
    return SavedLocation(
        id="L1",
        name="Hotel Lutetia",
        category=LocationCategory.ACCOMMODATION,
        location=GeoLocation(lat=48.8512, lon=2.3265, address="45 Bd Raspail, Paris"),
    )


@pytest.fixture
def other_hotel() -> SavedLocation:
    return SavedLocation(
        id="L2",
        name="Hotel Regina",
        category=LocationCategory.ACCOMMODATION,
        location=GeoLocation(lat=48.8638, lon=2.3318, address="2 Pl. des Pyramides, Paris"),
    )

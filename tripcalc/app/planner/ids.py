"""Identity generation for items and saved locations."""

import uuid
from typing import Protocol


class IdGenerator(Protocol):
    """Produces identifiers that never collide within a trip."""

    def new_id(self) -> str:
        """Return a fresh identifier."""
        ...


class UuidIdGenerator:
    """Random UUID4-based identifiers."""

    def new_id(self) -> str:
        return uuid.uuid4().hex


class SequentialIdGenerator:
    """Deterministic ``<prefix>-<n>`` identifiers for tests and seed data."""

    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = 0

    def new_id(self) -> str:
        self._counter += 1
        return f"{self._prefix}-{self._counter}"

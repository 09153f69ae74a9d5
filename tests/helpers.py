"""Constants and helpers shared across the test modules."""

from typing import Iterable

ADMIN_KEY = "test-admin-key"


def scripted_source(ids: Iterable[str]):
    """Random source that hands out ``ids`` in order, ignoring alphabet and size."""
    it = iter(ids)

    def source(alphabet: str, size: int) -> str:
        return next(it)

    return source

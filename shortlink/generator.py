"""Random short identifier generation.

Identifiers are drawn uniformly from a 62-symbol alphabet. The random source
is injectable: any callable taking ``(alphabet, size)`` and returning a string
works, which lets tests replace nanoid with a scripted sequence.

Flow Diagram — generate_unique()
================================
::
    ┌─────────────┐
    │ generate()   │◄──────────┐
    │ default len  │           │
    └──────┬──────┘           │
           ▼                  │
    ┌─────────────┐   taken   │
    │ store.get()  ├───────────┘
    └──────┬──────┘  (max_attempts)
      free │         exhausted
           ▼              │
    ┌─────────────┐  ┌────▼────────┐
    │ return id    │  │ generate()  │
    └─────────────┘  │ length + 1  │
                     │ (unchecked) │
                     └─────────────┘
"""

import logging
from typing import Callable, Optional

from nanoid import generate as nanoid_generate
from prometheus_client import Counter

from shortlink.store import LinkStore

__all__ = ["ALPHABET", "RandomSource", "ShortIdGenerator"]

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"

RandomSource = Callable[[str, int], str]

ID_COLLISIONS_TOTAL = Counter(
    "shortlink_id_collisions_total",
    "Generated identifiers that were already present in the store",
)

logger = logging.getLogger(__name__)


class ShortIdGenerator:
    def __init__(
        self,
        length: int = 6,
        max_attempts: int = 5,
        random_source: RandomSource = nanoid_generate,
    ):
        assert isinstance(length, int) and length > 0, f"length must be a positive integer, got {length!r}"
        assert max_attempts > 0, f"max_attempts must be positive, got {max_attempts!r}"
        self.length = length
        self.max_attempts = max_attempts
        self._random_source = random_source

    def generate(self, length: Optional[int] = None) -> str:
        size = self.length if length is None else length
        if not isinstance(size, int) or size <= 0:
            raise ValueError(f"length must be a positive integer, got {size!r}")
        return self._random_source(ALPHABET, size)

    async def generate_unique(self, store: LinkStore) -> str:
        """Return an identifier that was free in ``store`` when checked.

        After ``max_attempts`` collisions the length grows by one and the
        result is returned without checking it.
        """
        for _ in range(self.max_attempts):
            short_id = self.generate()
            if await store.get(short_id) is None:
                return short_id
            ID_COLLISIONS_TOTAL.inc()

        logger.warning(
            "identifier space congested after %d attempts, falling back to length %d",
            self.max_attempts,
            self.length + 1,
        )
        return self.generate(self.length + 1)

"""
Identifier generators injected into the store.

``SequentialIdGenerator`` yields ``ride-1``, ``ride-2``, ... per prefix and
is what tests use.  ``UuidIdGenerator`` is the production default; give it a
seed to make the sequence reproducible.
"""

from __future__ import annotations

import itertools
import random
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Optional


class IdGenerator(ABC):
    @abstractmethod
    def next_id(self, prefix: str) -> str: ...


class SequentialIdGenerator(IdGenerator):
    def __init__(self, start: int = 1):
        self._counters: dict[str, itertools.count] = defaultdict(
            lambda: itertools.count(start)
        )

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counters[prefix])}"


class UuidIdGenerator(IdGenerator):
    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed) if seed is not None else None

    def next_id(self, prefix: str) -> str:
        if self._rng is None:
            value = uuid.uuid4()
        else:
            value = uuid.UUID(int=self._rng.getrandbits(128), version=4)
        return f"{prefix}-{value.hex[:12]}"


def build_id_generator(strategy: str) -> IdGenerator:
    if strategy == "sequential":
        return SequentialIdGenerator()
    if strategy == "uuid":
        return UuidIdGenerator()
    raise ValueError(f"Unknown id strategy: {strategy!r}")

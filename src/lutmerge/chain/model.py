from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterator
import uuid

from lutmerge.lut.base import LutError
from lutmerge.lut.types import LutDocument


logger = logging.getLogger(__name__)

MAX_CHAIN_LENGTH = 5


class ChainCapacityError(LutError):
    def __init__(self, capacity: int = MAX_CHAIN_LENGTH) -> None:
        super().__init__(f"maximum {capacity} LUTs in chain")
        self.capacity = capacity


def clamp_intensity(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass
class ChainEntry:
    lut_id: str
    document: LutDocument
    intensity: float = 1.0
    entry_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class LutChain:
    """Ordered LUT chain, applied first to last, holding at most ``capacity`` entries."""

    def __init__(self, capacity: int = MAX_CHAIN_LENGTH) -> None:
        if not 1 <= capacity <= MAX_CHAIN_LENGTH:
            raise ValueError(f"chain capacity must be between 1 and {MAX_CHAIN_LENGTH}, got {capacity}")
        self.capacity = capacity
        self._entries: list[ChainEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ChainEntry]:
        return iter(list(self._entries))

    @property
    def entries(self) -> tuple[ChainEntry, ...]:
        return tuple(self._entries)

    def add(self, lut_id: str, document: LutDocument, intensity: float = 1.0) -> ChainEntry:
        if len(self._entries) >= self.capacity:
            raise ChainCapacityError(self.capacity)
        entry = ChainEntry(lut_id=lut_id, document=document, intensity=clamp_intensity(intensity))
        self._entries.append(entry)
        logger.debug("chain add lut=%s entry=%s position=%d", lut_id, entry.entry_id, len(self._entries))
        return entry

    def get(self, entry_id: str) -> ChainEntry:
        for entry in self._entries:
            if entry.entry_id == entry_id:
                return entry
        raise KeyError(f"unknown chain entry: {entry_id}")

    def remove(self, entry_id: str) -> None:
        self._entries = [e for e in self._entries if e.entry_id != entry_id]

    def remove_lut(self, lut_id: str) -> int:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.lut_id != lut_id]
        return before - len(self._entries)

    def set_intensity(self, entry_id: str, intensity: float) -> ChainEntry:
        entry = self.get(entry_id)
        entry.intensity = clamp_intensity(intensity)
        return entry

    def move(self, entry_id: str, index: int) -> None:
        entry = self.get(entry_id)
        self._entries.remove(entry)
        index = max(0, min(len(self._entries), index))
        self._entries.insert(index, entry)

    def clear(self) -> None:
        self._entries.clear()

    def stages(self) -> list[tuple[LutDocument, float]]:
        return [(e.document, e.intensity) for e in self._entries]

"""Offset-aligned output buffers.

Each ``OutputBuffer`` holds one value per bar, indexed by bar offset
(0 = newest). A cell is either a float or empty (``None``); emptiness is
tracked in a separate mask rather than encoded as a magic number.

The buffer set is kept aligned with the price series by two operations:
``shift_sync(k)`` when k new bars arrive (existing cells move k offsets
older) and ``resize(n)`` when bars appear or disappear at the old end.
"""

from __future__ import annotations

import logging
from typing import Iterator

import numpy as np

logger = logging.getLogger(__name__)


class OutputBuffer:
    """One named series of optional doubles, newest bar at index 0."""

    __slots__ = ("name", "_values", "_valid")

    def __init__(self, name: str, size: int = 0):
        self.name = name
        self._values = np.zeros(size, dtype=np.float64)
        self._valid = np.zeros(size, dtype=bool)

    def __len__(self) -> int:
        return self._values.shape[0]

    def _check(self, offset: int) -> None:
        if offset < 0 or offset >= self._values.shape[0]:
            raise IndexError(
                f"{self.name}: offset {offset} out of range for {len(self)} bars"
            )

    def __getitem__(self, offset: int) -> float | None:
        self._check(offset)
        if not self._valid[offset]:
            return None
        return float(self._values[offset])

    def __setitem__(self, offset: int, value: float | None) -> None:
        self._check(offset)
        if value is None:
            self._valid[offset] = False
            self._values[offset] = 0.0
        else:
            self._valid[offset] = True
            self._values[offset] = value

    def get(self, offset: int, default: float | None = None) -> float | None:
        """Read a cell, returning ``default`` when empty or out of range."""
        if offset < 0 or offset >= self._values.shape[0]:
            return default
        value = self[offset]
        return default if value is None else value

    def is_set(self, offset: int) -> bool:
        self._check(offset)
        return bool(self._valid[offset])

    def reset(self, size: int | None = None) -> None:
        """Empty every cell, optionally resizing first."""
        if size is not None and size != len(self):
            self._values = np.zeros(size, dtype=np.float64)
            self._valid = np.zeros(size, dtype=bool)
        else:
            self._values.fill(0.0)
            self._valid.fill(False)

    def shift(self, count: int) -> None:
        """Move every cell ``count`` offsets older, emptying offsets 0..count-1."""
        if count <= 0:
            return
        self._values = np.concatenate([np.zeros(count, dtype=np.float64), self._values])
        self._valid = np.concatenate([np.zeros(count, dtype=bool), self._valid])

    def resize(self, size: int) -> None:
        """Grow (with empty cells) or trim at the oldest end."""
        current = len(self)
        if size == current:
            return
        if size < current:
            self._values = self._values[:size].copy()
            self._valid = self._valid[:size].copy()
        else:
            extra = size - current
            self._values = np.concatenate([self._values, np.zeros(extra, dtype=np.float64)])
            self._valid = np.concatenate([self._valid, np.zeros(extra, dtype=bool)])

    def to_list(self) -> list[float | None]:
        """Return all cells, newest first."""
        return [float(v) if ok else None for v, ok in zip(self._values, self._valid)]

    def to_array(self) -> np.ndarray:
        """Return a copy with empty cells as NaN, newest first."""
        out = self._values.copy()
        out[~self._valid] = np.nan
        return out


class TimeSeriesBufferSet:
    """The output buffers of one engine instance, kept the same length."""

    def __init__(self, names: list[str] | tuple[str, ...]):
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate buffer names: {names}")
        self._buffers: dict[str, OutputBuffer] = {n: OutputBuffer(n) for n in names}
        self._sized = False

    def __getitem__(self, name: str) -> OutputBuffer:
        return self._buffers[name]

    def __iter__(self) -> Iterator[OutputBuffer]:
        return iter(self._buffers.values())

    @property
    def names(self) -> list[str]:
        return list(self._buffers)

    @property
    def size(self) -> int:
        return len(next(iter(self._buffers.values()))) if self._buffers else 0

    @property
    def is_sized(self) -> bool:
        """False until the first ``reset``, and again after ``release``."""
        return self._sized

    def reset(self, size: int | None = None) -> None:
        """Empty every buffer, optionally resizing to ``size`` bars."""
        for buf in self._buffers.values():
            buf.reset(size)
        self._sized = True
        logger.debug("Buffers %s reset to %d bars", self.names, self.size)

    def shift_sync(self, shift_amount: int) -> None:
        """Realign after ``shift_amount`` new bars; no-op for 0."""
        if shift_amount <= 0:
            return
        for buf in self._buffers.values():
            buf.shift(shift_amount)

    def resize(self, size: int) -> None:
        for buf in self._buffers.values():
            buf.resize(size)

    def release(self) -> None:
        for buf in self._buffers.values():
            buf.reset(0)
        self._sized = False

    def snapshot(self) -> dict[str, list[float | None]]:
        """Copy of every buffer, newest first."""
        return {name: buf.to_list() for name, buf in self._buffers.items()}

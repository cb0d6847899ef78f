"""History and memory stores.

Both stores keep their collection in memory, check it against the rules in
``rules.py`` after every mutation, and write it through the storage adapter
when one is attached.  A mutation that would break a rule is rolled back
and raises ``StoreInvariantError``.
"""
from __future__ import annotations

import logging
from typing import Callable

from config import HISTORY_LIMIT, MEMORY_SLOTS
from errors import StoreInvariantError
from models import CalculatorMode, HistoryEntry, MemorySlot, _new_id, _utcnow
from rules import ValidationReport, validate_history, validate_memory
from storage import StorageAdapter

logger = logging.getLogger("calcsuite.store")


# ---------------------------------------------------------------------------
# History store
# ---------------------------------------------------------------------------

class HistoryStore:
    """Completed calculations, newest first, capped at ``limit`` entries."""

    def __init__(
        self,
        storage: StorageAdapter | None = None,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        self.storage = storage
        self.limit = limit
        self._entries: list[HistoryEntry] = []
        if storage is not None:
            # Stored order is insertion order; timestamps need not be monotonic.
            self._entries = storage.get_history()[:limit]

    # -- helpers -------------------------------------------------------------

    def _commit(self, entries: list[HistoryEntry]) -> None:
        previous = self._entries
        self._entries = entries
        report = validate_history(self)
        if not report.passed:
            self._entries = previous
            raise StoreInvariantError(report)
        if self.storage is not None:
            self.storage.set_history(self._entries)

    # -- queries -------------------------------------------------------------

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def get(self, entry_id: str) -> HistoryEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def list(self, *, mode: CalculatorMode | None = None) -> list[HistoryEntry]:
        if mode is None:
            return list(self._entries)
        return [e for e in self._entries if e.mode == mode]

    def __len__(self) -> int:
        return len(self._entries)

    def validate(self) -> ValidationReport:
        return validate_history(self)

    # -- mutations -----------------------------------------------------------

    def add_entry(self, expression: str, result: str, mode: CalculatorMode) -> HistoryEntry:
        """Prepend a new entry, evicting the oldest beyond the limit."""
        entry = HistoryEntry(
            id=_new_id(),
            expression=expression,
            result=result,
            timestamp=_utcnow(),
            mode=mode,
        )
        self._commit([entry, *self._entries][: self.limit])
        logger.debug("history += %s = %s (%s)", expression, result, entry.mode.value)
        return entry

    def delete_entry(self, entry_id: str) -> bool:
        """Remove one entry.  Unknown ids are ignored."""
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._commit(remaining)
        return True

    def clear(self) -> None:
        self._commit([])


# ---------------------------------------------------------------------------
# Memory store
# ---------------------------------------------------------------------------

class MemoryStore:
    """Up to ``max_slots`` memory registers plus an active-slot index.

    Writing past the current length pads the gap with zero slots.  Writes
    at an index outside ``[0, max_slots)`` are ignored.
    """

    def __init__(
        self,
        storage: StorageAdapter | None = None,
        max_slots: int = MEMORY_SLOTS,
    ) -> None:
        self.storage = storage
        self.max_slots = max_slots
        self.active_slot = 0
        self._slots: list[MemorySlot] = []
        if storage is not None:
            self._slots = storage.get_memory()[:max_slots]

    # -- helpers -------------------------------------------------------------

    def _commit(self, slots: list[MemorySlot], active_slot: int | None = None) -> None:
        previous = (self._slots, self.active_slot)
        self._slots = slots
        if active_slot is not None:
            self.active_slot = active_slot
        report = validate_memory(self)
        if not report.passed:
            self._slots, self.active_slot = previous
            raise StoreInvariantError(report)
        if self.storage is not None:
            self.storage.set_memory(self._slots)

    def _target(self, slot: int | None) -> int:
        return self.active_slot if slot is None else slot

    def _write(self, slot: int | None, update: Callable[[MemorySlot], MemorySlot]) -> bool:
        index = self._target(slot)
        if not 0 <= index < self.max_slots:
            logger.debug("ignoring write to memory slot %d (capacity %d)", index, self.max_slots)
            return False
        slots = list(self._slots)
        while len(slots) <= index:
            slots.append(MemorySlot())
        slots[index] = update(slots[index])
        self._commit(slots)
        return True

    # -- queries -------------------------------------------------------------

    @property
    def slots(self) -> tuple[MemorySlot, ...]:
        return tuple(self._slots)

    @property
    def has_memory(self) -> bool:
        return bool(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def recall(self, slot: int | None = None) -> float:
        """Value of a slot, or 0 if the slot does not exist."""
        index = self._target(slot)
        if 0 <= index < len(self._slots):
            return self._slots[index].value
        return 0.0

    def validate(self) -> ValidationReport:
        return validate_memory(self)

    # -- mutations -----------------------------------------------------------

    def add(self, value: float, slot: int | None = None) -> bool:
        return self._write(slot, lambda s: s.model_copy(update={"value": s.value + value}))

    def subtract(self, value: float, slot: int | None = None) -> bool:
        return self._write(slot, lambda s: s.model_copy(update={"value": s.value - value}))

    def store(self, value: float, slot: int | None = None) -> bool:
        return self._write(slot, lambda s: MemorySlot(value=value))

    def label(self, slot: int, text: str | None) -> bool:
        if not 0 <= slot < len(self._slots):
            return False
        slots = list(self._slots)
        slots[slot] = MemorySlot(value=slots[slot].value, label=text)
        self._commit(slots)
        return True

    def add_slot(self, value: float, label: str | None = None) -> int | None:
        """Append a slot and make it active.  Returns its index."""
        if len(self._slots) >= self.max_slots:
            logger.debug("memory full, not adding a slot")
            return None
        index = len(self._slots)
        self._commit([*self._slots, MemorySlot(value=value, label=label)], active_slot=index)
        return index

    def set_active_slot(self, index: int) -> bool:
        if not 0 <= index < len(self._slots):
            return False
        self.active_slot = index
        return True

    def clear(self, slot: int | None = None) -> None:
        """Clear every slot, or remove one and shift the rest down."""
        if slot is None:
            self._commit([], active_slot=0)
            return
        if not 0 <= slot < len(self._slots):
            return
        slots = [s for i, s in enumerate(self._slots) if i != slot]
        active = self.active_slot
        if slot < active:
            active -= 1
        active = min(active, max(len(slots) - 1, 0))
        self._commit(slots, active_slot=active)

# -*- coding: utf-8 -*-
"""
String Registry
===============

Every translatable string found in the game sources becomes one
`StringRecord`, keyed by its string ID (the index into dialog.tlk).
Records know their parents and children (dialog flow) and their neighbors
(script strings sharing a file). The registry is the only place where those
relations are changed, so both ends of an edge always agree.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional

from ietools.core.exceptions import RegistryError

INVALID_REFERENCE_ID = -1
INVALID_REFERENCE_TEXT = "INVALID REFERENCE"
NO_TEXT_PLACEHOLDER = "** No text specified in file **"


class StringType(Enum):
    """Kinds of strings, fixed when a record is created."""
    DIALOG = "dialog"
    JOURNAL = "journal"
    SCRIPT_HEAD = "script_head"
    SCRIPT_JOURNAL = "script_journal"
    ERROR = "error"

    @property
    def pipeline(self) -> Optional[str]:
        """Name of the linearization pipeline for this type, or None if unused."""
        if self in (StringType.DIALOG, StringType.JOURNAL):
            return "dialog"
        if self in (StringType.SCRIPT_HEAD, StringType.SCRIPT_JOURNAL):
            return "script"
        return None


class SequenceGenerator:
    """Hands out creation numbers so records with equal text stay distinguishable."""

    def __init__(self, start: int = 0):
        self._next = start

    def next(self) -> int:
        value = self._next
        self._next += 1
        return value


@dataclass(eq=False)
class StringRecord:
    """A single string ID with its text and its relations."""
    id: int
    text: str
    type: StringType
    source_file: str
    serial: int = 0
    # dicts used as insertion-ordered sets
    parents: Dict[int, None] = field(default_factory=dict)
    children: Dict[int, None] = field(default_factory=dict)
    neighbors: Dict[int, None] = field(default_factory=dict)

    def get_text(self, filename: str) -> str:
        """Text as seen from `filename`; foreign strings get their file prefixed."""
        if self.source_file == filename:
            return self.text
        return f"{self.source_file}: {self.text}"

    def clone(self) -> "StringRecord":
        return StringRecord(
            id=self.id,
            text=self.text,
            type=self.type,
            source_file=self.source_file,
            serial=self.serial,
            parents=dict(self.parents),
            children=dict(self.children),
            neighbors=dict(self.neighbors),
        )


class StringRegistry:
    """Maps string IDs to records and keeps all relations symmetric."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._records: Dict[int, StringRecord] = {}

    def __contains__(self, string_id: int) -> bool:
        return string_id in self._records

    def __getitem__(self, string_id: int) -> StringRecord:
        try:
            return self._records[string_id]
        except KeyError:
            raise RegistryError(f"String ID {string_id} is not registered") from None

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def get(self, string_id: int) -> Optional[StringRecord]:
        return self._records.get(string_id)

    def ids(self) -> List[int]:
        """All registered IDs in ascending order."""
        return sorted(self._records)

    def records(self) -> List[StringRecord]:
        return [self._records[i] for i in sorted(self._records)]

    def add(self, record: StringRecord) -> StringRecord:
        """Register a record; an already registered ID keeps its first record.

        A record still carrying the no-text placeholder takes over the text
        (and file) of a later record that has a real one.
        """
        existing = self._records.get(record.id)
        if existing is not None:
            if existing.text == NO_TEXT_PLACEHOLDER and record.text != NO_TEXT_PLACEHOLDER:
                existing.text = record.text
                existing.source_file = record.source_file
                self.logger.debug(f"String {record.id}: placeholder replaced by text from {record.source_file}")
                return existing
            self.logger.debug(
                f"String {record.id} already registered from {existing.source_file}, "
                f"ignoring duplicate from {record.source_file}"
            )
            return existing
        self._records[record.id] = record
        return record

    def create(self, string_id: int, text: str, string_type: StringType, source_file: str,
               sequence: Optional[SequenceGenerator] = None) -> StringRecord:
        serial = sequence.next() if sequence is not None else len(self._records)
        return self.add(StringRecord(string_id, text, string_type, source_file, serial))

    def ensure_sentinel(self) -> StringRecord:
        """Make sure the ERROR record standing in for unresolvable references exists."""
        return self.add(StringRecord(INVALID_REFERENCE_ID, INVALID_REFERENCE_TEXT, StringType.ERROR, "", -1))

    def add_edge(self, parent_id: int, child_id: int) -> None:
        if parent_id == child_id:
            raise RegistryError(f"String {parent_id} cannot be its own child")
        parent = self[parent_id]
        child = self[child_id]
        parent.children[child_id] = None
        child.parents[parent_id] = None

    def remove_edge(self, parent_id: int, child_id: int) -> None:
        parent = self._records.get(parent_id)
        child = self._records.get(child_id)
        if parent is not None:
            parent.children.pop(child_id, None)
        if child is not None:
            child.parents.pop(parent_id, None)

    def add_neighbors(self, first_id: int, second_id: int) -> None:
        if first_id == second_id:
            raise RegistryError(f"String {first_id} cannot be its own neighbor")
        first = self[first_id]
        second = self[second_id]
        first.neighbors[second_id] = None
        second.neighbors[first_id] = None

    def remove_neighbors(self, first_id: int, second_id: int) -> None:
        first = self._records.get(first_id)
        second = self._records.get(second_id)
        if first is not None:
            first.neighbors.pop(second_id, None)
        if second is not None:
            second.neighbors.pop(first_id, None)

    def remove(self, string_id: int) -> StringRecord:
        """Remove a record together with every reference to it."""
        record = self[string_id]
        for child_id in list(record.children):
            self.remove_edge(string_id, child_id)
        for parent_id in list(record.parents):
            self.remove_edge(parent_id, string_id)
        for neighbor_id in list(record.neighbors):
            self.remove_neighbors(string_id, neighbor_id)
        del self._records[string_id]
        return record

    def chop_to_range(self, min_inclusive: int, max_inclusive: int) -> List[int]:
        """Drop every string outside [min_inclusive, max_inclusive]; returns removed IDs."""
        removed = [i for i in sorted(self._records) if i < min_inclusive or i > max_inclusive]
        for string_id in removed:
            self.remove(string_id)
        if removed:
            self.logger.info(f"Removed {len(removed)} strings outside {min_inclusive}-{max_inclusive}")
        return removed

    def copy(self) -> "StringRegistry":
        """Independent copy whose records and edge sets can be consumed freely."""
        result = StringRegistry()
        result._records = {i: record.clone() for i, record in self._records.items()}
        return result

    def component(self, ids: Iterable[int]) -> Dict[int, StringRecord]:
        """Records for `ids`, in the given order."""
        return {i: self[i] for i in ids}

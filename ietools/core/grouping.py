# -*- coding: utf-8 -*-
"""
Group Creator
=============

Splits the string registry into connected groups and orders each one for
reading. The result ends with the IDs of the requested range that no parsed
file uses at all.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from ietools.core.linearizer import strategy_for
from ietools.core.strings import StringRecord, StringRegistry


class GroupKind(Enum):
    # values match StringType.pipeline
    DIALOG = "dialog"
    SCRIPT = "script"
    NOT_USED = "not used"


@dataclass
class StringGroup:
    kind: GroupKind
    ids: List[int]


class GroupCreator:
    """Builds linearized groups out of a registry.

    The registry itself is left untouched; partitioning consumes a copy.
    """

    def __init__(self, registry: StringRegistry, min_inclusive: int, max_inclusive: int):
        self.logger = logging.getLogger(__name__)
        self.registry = registry
        self.min_inclusive = min_inclusive
        self.max_inclusive = max_inclusive

    def create(self) -> List[StringGroup]:
        not_used = self._not_used_ids()
        working: Dict[int, StringRecord] = {r.id: r for r in self.registry.copy().records()}
        groups: List[StringGroup] = []

        while working:
            seed = min(working)
            seed_type = working[seed].type
            strategy = strategy_for(seed_type)

            if strategy is None:
                working.pop(seed)
                self.logger.debug(f"String {seed} ({seed_type.value}) starts no group")
                continue

            component = strategy.collect(seed, working, self.registry)
            result = strategy.linearize(component)
            if result.ids:
                groups.append(StringGroup(GroupKind(seed_type.pipeline), result.ids))
                self.logger.debug(f"Group {len(groups)} created from string {seed}, {len(result.ids)} strings")

        groups.append(StringGroup(GroupKind.NOT_USED, not_used))
        self.logger.info(f"Created {len(groups) - 1} string groups, {len(not_used)} unused IDs")
        return groups

    def _not_used_ids(self) -> List[int]:
        return [i for i in range(self.min_inclusive, self.max_inclusive + 1) if i not in self.registry]


def format_groups(groups: List[StringGroup]) -> str:
    """Render groups as the plain text blocks translators work through."""
    lines: List[str] = []
    for number, group in enumerate(groups, start=1):
        lines.append("")
        lines.append(f"// Group {number} ({group.kind.value}), {len(group.ids)} strings")
        lines.append("")
        lines.extend(str(i) for i in group.ids)
    return "\n".join(lines) + "\n"


def write_groups(groups: List[StringGroup], path) -> None:
    with open(path, 'w', encoding='utf-8', newline='\n') as f:
        f.write(format_groups(groups))

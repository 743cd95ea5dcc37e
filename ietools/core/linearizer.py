# -*- coding: utf-8 -*-
"""
Group Linearizers
=================

Turns a connected group of strings into the order in which a translator
reads them. Dialog groups without cycles keep replies next to each other and
never show an answer before its question; groups with cycles fall back to a
simpler walk; script groups are just sorted.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Container, Deque, Dict, Iterable, List, Mapping, Optional

from ietools.core.strings import StringRecord, StringRegistry, StringType

logger = logging.getLogger(__name__)

Component = Mapping[int, StringRecord]


@dataclass
class LinearizeResult:
    """Ordered IDs of a group; `cycle_detected` means the order could not be built."""
    ids: List[int] = field(default_factory=list)
    cycle_detected: bool = False


def walk_family(seed: int, pool: Dict[int, StringRecord], keep: Optional[Container[int]] = None) -> List[int]:
    """Collect everything connected to `seed` through parent and child edges.

    Visiting an ID pops it from `pool`, so each ID is expanded once and
    cycles end the walk. For every visited ID its parents are walked first,
    then the ID and all its children are listed, then the children are
    walked. IDs not in `keep` (when given) are left out of the result.
    """
    seen: Dict[int, None] = {}
    # (is_visit, id) pairs, popped from the end
    actions = [(True, seed)]
    while actions:
        is_visit, string_id = actions.pop()
        if not is_visit:
            if keep is None or string_id in keep:
                seen.setdefault(string_id, None)
            continue
        record = pool.pop(string_id, None)
        if record is None:
            continue
        planned = [(True, p) for p in record.parents]
        planned.append((False, string_id))
        planned.extend((False, c) for c in record.children)
        planned.extend((True, c) for c in record.children)
        actions.extend(reversed(planned))
    return list(seen)


def _parents_in(component: Component, string_id: int) -> List[int]:
    return [p for p in component[string_id].parents if p in component]


def _children_in(component: Component, string_id: int) -> List[int]:
    return [c for c in component[string_id].children if c in component]


def has_cycle(component: Component) -> bool:
    """Check whether child edges inside `component` form a cycle.

    A depth-first search is started from every node, since a cycle does not
    have to be reachable from a root. Nodes on the current path are gray;
    meeting a gray node again closes a cycle.
    """
    gray, black = 1, 2
    color: Dict[int, int] = {}
    for start in component:
        if start in color:
            continue
        color[start] = gray
        stack = [(start, iter(_children_in(component, start)))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                color[node] = black
                stack.pop()
                continue
            state = color.get(child)
            if state == gray:
                return True
            if state is None:
                color[child] = gray
                stack.append((child, iter(_children_in(component, child))))
    return False


class CyclicDialogLinearizer:
    """Best-effort order for dialog groups that contain cycles.

    No precedence guarantee: a child can show up before a parent that lives
    on another branch.
    """

    def linearize(self, component: Component) -> LinearizeResult:
        if not component:
            return LinearizeResult()
        pool = dict(component)
        ids = walk_family(min(component), pool, keep=component)
        return LinearizeResult(ids)


class AcyclicDialogLinearizer:
    """Reading order for dialog groups without cycles.

    Every string comes after its parents and all answers to one line are
    emitted together. Components with cycles are reported through
    `LinearizeResult.cycle_detected` so `DialogLinearizer` can fall back.
    """

    def linearize(self, component: Component) -> LinearizeResult:
        if has_cycle(component):
            return LinearizeResult(cycle_detected=True)

        roots = sorted(i for i in component if not _parents_in(component, i))
        queue: Deque[int] = deque(roots)
        emitted: Dict[int, None] = {}

        while queue:
            self._rotate_to_candidate(component, queue, emitted)

            siblings = self._siblings(component, queue[0])
            for sibling in siblings:
                if sibling in queue:
                    queue.remove(sibling)
            for sibling in siblings:
                emitted.setdefault(sibling, None)

            children: List[int] = []
            for sibling in siblings:
                children.extend(_children_in(component, sibling))
            for child in reversed(children):
                if child not in queue and child not in emitted:
                    queue.appendleft(child)

        return LinearizeResult(list(emitted))

    def _is_candidate(self, component: Component, string_id: int, emitted: Dict[int, None]) -> bool:
        for parent in _parents_in(component, string_id):
            if parent not in emitted:
                return False
            # a sibling still waiting for another parent would split the batch
            for sibling in _children_in(component, parent):
                for sibling_parent in _parents_in(component, sibling):
                    if sibling_parent not in emitted:
                        return False
        return True

    def _rotate_to_candidate(self, component: Component, queue: Deque[int], emitted: Dict[int, None]) -> None:
        for _ in range(len(queue)):
            if self._is_candidate(component, queue[0], emitted):
                return
            queue.rotate(-1)
        # nobody qualifies, take the smallest ID
        smallest = min(queue)
        while queue[0] != smallest:
            queue.rotate(-1)

    def _siblings(self, component: Component, string_id: int) -> List[int]:
        parents = _parents_in(component, string_id)
        if not parents:
            return [string_id]
        result: Dict[int, None] = {}
        for parent in parents:
            for child in _children_in(component, parent):
                result.setdefault(child, None)
        return list(result)


class DialogLinearizer:
    """Strategy for dialog and journal groups.

    Collects the family of the seed and orders it with the acyclic
    linearizer, switching to the cyclic walk when the group has a cycle.
    """

    def __init__(self):
        self.acyclic = AcyclicDialogLinearizer()
        self.fallback = CyclicDialogLinearizer()

    def collect(self, seed: int, pool: Dict[int, StringRecord], registry: StringRegistry) -> Dict[int, StringRecord]:
        member_ids = walk_family(seed, pool)
        # the invalid reference marker is not a string anyone translates
        return registry.component(i for i in member_ids if registry[i].type is not StringType.ERROR)

    def linearize(self, component: Component) -> LinearizeResult:
        if not component:
            return LinearizeResult()
        result = self.acyclic.linearize(component)
        if result.cycle_detected:
            logger.debug(f"Cycle in group starting at {min(component)}, using fallback order")
            result = self.fallback.linearize(component)
        return result


class ScriptLinearizer:
    """Script strings have no flow, so their group is sorted by ID."""

    def collect(self, seed: int, pool: Dict[int, StringRecord], registry: StringRegistry) -> Dict[int, StringRecord]:
        return registry.component(walk_neighbors(seed, pool))

    def linearize(self, component: Iterable[int]) -> LinearizeResult:
        return LinearizeResult(sorted(component))


def walk_neighbors(seed: int, pool: Dict[int, StringRecord]) -> List[int]:
    """Collect `seed` and everything reachable through neighbor links, popping them from `pool`."""
    result: List[int] = []
    stack = [seed]
    while stack:
        string_id = stack.pop()
        record = pool.pop(string_id, None)
        if record is None:
            continue
        result.append(string_id)
        stack.extend(n for n in record.neighbors if n in pool)
    return result


def strategy_for(string_type: StringType):
    """Pick the linearizer for a group seeded by a string of `string_type`.

    Returns None for types that never form a group.
    """
    pipeline = string_type.pipeline
    if pipeline == "dialog":
        return DialogLinearizer()
    if pipeline == "script":
        return ScriptLinearizer()
    return None


def linearize_dialog(component: Component) -> LinearizeResult:
    """Linearize a dialog group, falling back to the cyclic walk when needed."""
    return DialogLinearizer().linearize(component)

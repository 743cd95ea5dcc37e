from ietools.core.linearizer import (
    AcyclicDialogLinearizer, CyclicDialogLinearizer, DialogLinearizer, ScriptLinearizer,
    has_cycle, linearize_dialog, strategy_for,
)
from ietools.core.strings import INVALID_REFERENCE_ID, StringRegistry, StringType


def build_component(edges, extra_ids=()):
    registry = StringRegistry()
    ids = set(extra_ids)
    for parent, child in edges:
        ids.update((parent, child))
    for i in sorted(ids):
        registry.create(i, f"text {i}", StringType.DIALOG, "TEST")
    for parent, child in edges:
        registry.add_edge(parent, child)
    return registry.component(registry.ids())


def test_say_with_two_replies():
    component = build_component([(1, 2), (1, 3)])
    result = AcyclicDialogLinearizer().linearize(component)
    assert not result.cycle_detected
    assert result.ids == [1, 2, 3]


def test_shared_child_waits_for_second_root():
    component = build_component([(1, 2), (1, 3), (4, 3), (3, 5)])
    result = AcyclicDialogLinearizer().linearize(component)
    assert result.ids == [1, 4, 2, 3, 5]


def test_parents_come_first():
    component = build_component([(1, 2), (2, 3), (1, 4), (4, 5), (5, 6), (3, 6)])
    ids = AcyclicDialogLinearizer().linearize(component).ids
    assert sorted(ids) == [1, 2, 3, 4, 5, 6]
    for parent, child in [(1, 2), (2, 3), (1, 4), (4, 5), (5, 6), (3, 6)]:
        assert ids.index(parent) < ids.index(child)


def test_fallback_rotation_takes_smallest_id():
    # no candidate qualifies after 1, so the smallest queued ID is taken
    component = build_component([(1, 2), (1, 3), (1, 5), (5, 3)])
    result = AcyclicDialogLinearizer().linearize(component)
    assert result.ids == [1, 2, 3, 5]


def test_single_string():
    component = build_component([], extra_ids=[42])
    assert AcyclicDialogLinearizer().linearize(component).ids == [42]


def test_cycle_is_reported():
    component = build_component([(5, 6), (6, 5)])
    result = AcyclicDialogLinearizer().linearize(component)
    assert result.cycle_detected
    assert result.ids == []


def test_cycle_falls_back_to_walk():
    component = build_component([(5, 6), (6, 5)])
    result = linearize_dialog(component)
    assert not result.cycle_detected
    assert sorted(result.ids) == [5, 6]


def test_cyclic_walk_covers_component_once():
    component = build_component([(1, 2), (2, 3), (3, 1), (3, 4)])
    ids = CyclicDialogLinearizer().linearize(component).ids
    assert sorted(ids) == [1, 2, 3, 4]


def test_has_cycle():
    assert has_cycle(build_component([(1, 2), (2, 3), (3, 1)]))
    assert not has_cycle(build_component([(1, 2), (1, 3), (2, 4), (3, 4)]))


def test_has_cycle_without_root():
    # every node has a parent, the cycle is not reachable from a root
    component = build_component([(1, 2), (3, 4), (4, 3)])
    assert has_cycle(component)


def test_script_linearizer_sorts():
    assert ScriptLinearizer().linearize([9, 3, 7]).ids == [3, 7, 9]


def test_strategy_for_types():
    assert isinstance(strategy_for(StringType.DIALOG), DialogLinearizer)
    assert isinstance(strategy_for(StringType.JOURNAL), DialogLinearizer)
    assert isinstance(strategy_for(StringType.SCRIPT_HEAD), ScriptLinearizer)
    assert strategy_for(StringType.ERROR) is None


def test_dialog_strategy_collects_and_falls_back():
    registry = StringRegistry()
    registry.ensure_sentinel()
    for i in (5, 6, 7):
        registry.create(i, str(i), StringType.DIALOG, "LOOP")
    registry.add_edge(5, 6)
    registry.add_edge(6, 5)
    registry.add_edge(6, INVALID_REFERENCE_ID)
    pool = {r.id: r for r in registry.copy().records()}

    strategy = strategy_for(StringType.DIALOG)
    component = strategy.collect(5, pool, registry)
    result = strategy.linearize(component)

    assert sorted(component) == [5, 6]
    assert not result.cycle_detected
    assert sorted(result.ids) == [5, 6]
    assert sorted(pool) == [7]


def test_script_strategy_collects_neighbors():
    registry = StringRegistry()
    for i in (30, 10, 20, 40):
        registry.create(i, str(i), StringType.SCRIPT_HEAD, "AR.baf")
    registry.add_neighbors(30, 10)
    registry.add_neighbors(10, 20)
    pool = {r.id: r for r in registry.copy().records()}

    strategy = strategy_for(StringType.SCRIPT_HEAD)
    result = strategy.linearize(strategy.collect(10, pool, registry))

    assert result.ids == [10, 20, 30]
    assert sorted(pool) == [40]

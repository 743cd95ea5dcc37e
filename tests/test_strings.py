import pytest

from ietools.core.exceptions import RegistryError
from ietools.core.strings import (
    INVALID_REFERENCE_ID, NO_TEXT_PLACEHOLDER, SequenceGenerator, StringRegistry, StringType,
)


def make_registry(*ids, string_type=StringType.DIALOG):
    registry = StringRegistry()
    for i in ids:
        registry.create(i, f"text {i}", string_type, "TEST")
    return registry


def test_edges_are_symmetric():
    registry = make_registry(1, 2, 3)
    registry.add_edge(1, 2)
    registry.add_edge(1, 3)
    assert list(registry[1].children) == [2, 3]
    assert list(registry[2].parents) == [1]
    assert list(registry[3].parents) == [1]

    registry.remove_edge(1, 2)
    assert list(registry[1].children) == [3]
    assert not registry[2].parents


def test_neighbors_are_symmetric():
    registry = make_registry(10, 11, string_type=StringType.SCRIPT_HEAD)
    registry.add_neighbors(10, 11)
    assert 11 in registry[10].neighbors
    assert 10 in registry[11].neighbors
    registry.remove_neighbors(11, 10)
    assert not registry[10].neighbors
    assert not registry[11].neighbors


def test_self_loop_is_rejected():
    registry = make_registry(5)
    with pytest.raises(RegistryError):
        registry.add_edge(5, 5)
    with pytest.raises(RegistryError):
        registry.add_neighbors(5, 5)


def test_edge_to_unknown_id_is_rejected():
    registry = make_registry(5)
    with pytest.raises(RegistryError):
        registry.add_edge(5, 6)


def test_first_record_wins_on_duplicate_id():
    registry = StringRegistry()
    registry.create(7, "first", StringType.DIALOG, "A")
    registry.create(7, "second", StringType.JOURNAL, "B")
    assert len(registry) == 1
    assert registry[7].text == "first"
    assert registry[7].source_file == "A"


def test_chop_to_range_removes_dangling_references():
    registry = make_registry(50, 150)
    registry.add_edge(50, 150)

    removed = registry.chop_to_range(100, 200)

    assert removed == [50]
    assert 50 not in registry
    assert not registry[150].parents


def test_remove_clears_all_relations():
    registry = make_registry(1, 2, 3)
    registry.add_edge(1, 2)
    registry.add_edge(2, 3)
    registry.remove(2)
    assert not registry[1].children
    assert not registry[3].parents


def test_sentinel_is_registered_once():
    registry = StringRegistry()
    registry.ensure_sentinel()
    registry.ensure_sentinel()
    assert len(registry) == 1
    assert registry[INVALID_REFERENCE_ID].type is StringType.ERROR


def test_copy_is_independent():
    registry = make_registry(1, 2)
    registry.add_edge(1, 2)
    copy = registry.copy()
    copy.remove(2)
    assert 2 in registry
    assert list(registry[1].children) == [2]


def test_iteration_is_sorted():
    registry = make_registry(30, 10, 20)
    assert list(registry) == [10, 20, 30]
    assert registry.ids() == [10, 20, 30]


def test_get_text_prefixes_foreign_file():
    registry = make_registry(1)
    assert registry[1].get_text("TEST") == "text 1"
    assert registry[1].get_text("OTHER") == "TEST: text 1"


def test_sequence_generator_counts_up():
    sequence = SequenceGenerator()
    assert [sequence.next() for _ in range(3)] == [0, 1, 2]


def test_string_type_pipelines():
    assert StringType.DIALOG.pipeline == "dialog"
    assert StringType.JOURNAL.pipeline == "dialog"
    assert StringType.SCRIPT_HEAD.pipeline == "script"
    assert StringType.SCRIPT_JOURNAL.pipeline == "script"
    assert StringType.ERROR.pipeline is None


def test_chop_to_range_removes_neighbor_back_references():
    registry = make_registry(50, 150, 160, string_type=StringType.SCRIPT_HEAD)
    registry.add_neighbors(50, 150)
    registry.add_neighbors(50, 160)
    registry.add_neighbors(150, 160)

    registry.chop_to_range(100, 200)

    assert list(registry[150].neighbors) == [160]
    assert list(registry[160].neighbors) == [150]


def test_placeholder_takes_later_text():
    registry = StringRegistry()
    registry.create(500, NO_TEXT_PLACEHOLDER, StringType.JOURNAL, "A")
    registry.create(500, "Find the ring.", StringType.JOURNAL, "B")
    registry.create(500, "Ignored.", StringType.JOURNAL, "C")
    assert registry[500].text == "Find the ring."
    assert registry[500].source_file == "B"

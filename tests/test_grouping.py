from ietools.core.grouping import GroupCreator, GroupKind, StringGroup, format_groups, write_groups
from ietools.core.strings import StringRegistry, StringType


def sample_registry():
    registry = StringRegistry()
    registry.ensure_sentinel()
    for i in (100, 101, 102, 105):
        registry.create(i, f"dialog {i}", StringType.DIALOG, "DLG")
    registry.create(103, "journal", StringType.JOURNAL, "DLG")
    registry.add_edge(100, 101)
    registry.add_edge(100, 102)
    registry.add_edge(101, 103)
    registry.add_edge(105, -1)
    for i in (110, 108):
        registry.create(i, f"script {i}", StringType.SCRIPT_HEAD, "AR0100.baf")
    registry.create(109, "script journal", StringType.SCRIPT_JOURNAL, "AR0100.baf")
    registry.add_neighbors(110, 108)
    registry.add_neighbors(110, 109)
    registry.add_neighbors(108, 109)
    return registry


def test_groups_cover_every_string_once():
    registry = sample_registry()
    groups = GroupCreator(registry, 100, 112).create()

    listed = [i for g in groups if g.kind is not GroupKind.NOT_USED for i in g.ids]
    assert len(listed) == len(set(listed))
    translatable = {i for i in registry.ids() if registry[i].type is not StringType.ERROR}
    assert set(listed) == translatable


def test_group_order_and_kinds():
    groups = GroupCreator(sample_registry(), 100, 112).create()
    assert [g.kind for g in groups] == [
        GroupKind.DIALOG, GroupKind.DIALOG, GroupKind.SCRIPT, GroupKind.NOT_USED,
    ]
    assert groups[0].ids == [100, 101, 102, 103]
    assert groups[1].ids == [105]
    assert groups[2].ids == [108, 109, 110]


def test_not_used_lists_missing_ids_of_range():
    groups = GroupCreator(sample_registry(), 100, 112).create()
    assert groups[-1] == StringGroup(GroupKind.NOT_USED, [104, 106, 107, 111, 112])


def test_registry_is_left_untouched():
    registry = sample_registry()
    before = registry.ids()
    GroupCreator(registry, 100, 112).create()
    assert registry.ids() == before
    assert list(registry[100].children) == [101, 102]


def test_grouping_is_deterministic():
    first = GroupCreator(sample_registry(), 100, 112).create()
    second = GroupCreator(sample_registry(), 100, 112).create()
    assert first == second


def test_cyclic_group_is_still_listed():
    registry = StringRegistry()
    for i in (1, 2, 3):
        registry.create(i, str(i), StringType.DIALOG, "LOOP")
    registry.add_edge(1, 2)
    registry.add_edge(2, 3)
    registry.add_edge(3, 1)
    groups = GroupCreator(registry, 1, 3).create()
    assert len(groups) == 2
    assert sorted(groups[0].ids) == [1, 2, 3]
    assert groups[1].ids == []


def test_format_groups():
    groups = [
        StringGroup(GroupKind.DIALOG, [1, 2]),
        StringGroup(GroupKind.NOT_USED, [3]),
    ]
    assert format_groups(groups) == (
        "\n// Group 1 (dialog), 2 strings\n\n1\n2\n"
        "\n// Group 2 (not used), 1 strings\n\n3\n"
    )


def test_write_groups(tmp_path):
    path = tmp_path / "groups.txt"
    write_groups([StringGroup(GroupKind.SCRIPT, [7])], path)
    assert path.read_text(encoding="utf-8") == "\n// Group 1 (script), 1 strings\n\n7\n"

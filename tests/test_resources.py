import csv
import struct

import pytest

from ietools.core import resources
from ietools.core.exceptions import ParseError


def write_item(path, general, identified, description, identified_description):
    data = bytearray(114)
    for offset, value in zip(resources.ITM_OFFSETS, (general, identified, description, identified_description)):
        struct.pack_into('<i', data, offset, value)
    path.write_bytes(bytes(data))


def write_creature(path, short_name, long_name, soundset):
    data = bytearray(resources.CRE_SOUNDSET_OFFSET + 4 * resources.CRE_SOUNDSET_COUNT + 32)
    struct.pack_into('<i', data, 8, short_name)
    struct.pack_into('<i', data, 12, long_name)
    slots = list(soundset) + [-1] * (resources.CRE_SOUNDSET_COUNT - len(soundset))
    struct.pack_into('<100i', data, resources.CRE_SOUNDSET_OFFSET, *slots)
    path.write_bytes(bytes(data))


def test_parse_item(tmp_path):
    path = tmp_path / "SW1H01.ITM"
    write_item(path, 1000, 1001, -1, 5000)
    item = resources.parse_item(path)
    assert item.ids == [1000, 1001, -1, 5000]
    assert item.csv_row() == ["SW1H01.ITM", "1000", "1001", "", "5000"]


def test_short_item_is_rejected(tmp_path):
    path = tmp_path / "BROKEN.ITM"
    path.write_bytes(b"ITM V1  \x00\x00")
    with pytest.raises(ParseError):
        resources.parse_item(path)


def test_parse_creature(tmp_path):
    path = tmp_path / "IMOEN.CRE"
    write_creature(path, 1500, 1501, [1600, 9999, 1550, 1600])
    creature = resources.parse_creature(path)
    assert creature.short_name == 1500
    assert len(creature.soundset) == resources.CRE_SOUNDSET_COUNT
    assert creature.soundset_in_range(1000, 2000) == [1550, 1600]
    assert creature.csv_row(1000, 2000) == ["IMOEN.CRE", "1500", "1501", "1550", "1600"]


def test_parse_table(tmp_path):
    path = tmp_path / "TOOLTIP.2DA"
    path.write_text("2DA V1.0\n-1\n        NAME    DESC\nROW1    1200    1300\nROW2    *       +50000\n",
                    encoding="utf-8")
    table = resources.parse_table(path)
    assert table.ids == [-1, 1200, 1300, 50000]


def test_extract_items(tmp_path):
    folder = tmp_path / "itm"
    folder.mkdir()
    write_item(folder / "B.itm", 1200, 1201, -1, -1)
    write_item(folder / "A.itm", 1000, 1001, -1, 5000)
    write_item(folder / "C.itm", 3000, 3001, 3002, 3003)
    out_txt = tmp_path / "items.txt"
    out_csv = tmp_path / "items.csv"

    count = resources.extract("items", folder, 1000, 2000, out_txt, out_csv)

    assert count == 2
    assert out_txt.read_text(encoding="utf-8") == "1000\n1001\n\n1200\n1201\n\n"
    with open(out_csv, encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][0].endswith("1000-2000")
    assert rows[2][0] == "ITM File"
    assert rows[3] == ["A.itm", "1000", "1001", "", "5000"]
    assert rows[4] == ["B.itm", "1200", "1201", "", ""]


def test_extract_creatures(tmp_path):
    folder = tmp_path / "cre"
    folder.mkdir()
    write_creature(folder / "IMOEN.cre", 1500, 1500, [1600, 9999])
    write_creature(folder / "NOBODY.cre", -1, -1, [])
    out_txt = tmp_path / "creatures.txt"

    count = resources.extract("creatures", folder, 1000, 2000, out_txt)

    assert count == 1
    assert out_txt.read_text(encoding="utf-8") == "1500\n1500\n1600\n\n"


def test_extract_tables_with_headers(tmp_path):
    folder = tmp_path / "2da"
    folder.mkdir()
    (folder / "T.2da").write_text("2DA V1.0\n0\n  A\nX  1200  1300\n", encoding="utf-8")
    (folder / "U.2da").write_text("2DA V1.0\n0\n  A\nX  5\n", encoding="utf-8")
    out_txt = tmp_path / "tables.txt"

    count = resources.extract("tables", folder, 1000, 2000, out_txt)

    assert count == 1
    assert out_txt.read_text(encoding="utf-8") == "// T.2da\n\n1200\n1300\n\n"


def test_unknown_kind(tmp_path):
    with pytest.raises(ValueError):
        resources.extract("spells", tmp_path, 0, 10, tmp_path / "out.txt")

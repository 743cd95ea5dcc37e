# -*- coding: utf-8 -*-
"""
Resource String Extraction
==========================

Collects the string IDs used by binary game resources and tables:

- ITM: general/identified name and description
- CRE: short and long name plus the 100 sound set strings
- 2DA: every integer in the table

Only resources with at least one ID inside the requested range are kept.
"""

import csv
import logging
import re
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ietools.core.exceptions import ParseError, ReportError
from ietools.utils.encoding import list_files, read_text_safely

logger = logging.getLogger(__name__)

# offsets of little-endian int32 string references
ITM_OFFSETS = (8, 12, 80, 84)
CRE_NAME_OFFSETS = (8, 12)
CRE_SOUNDSET_OFFSET = 164
CRE_SOUNDSET_COUNT = 100

NO_STRING = -1

_INTEGER_RE = re.compile(r'^[+-]?\d+$')

PathLike = Union[str, Path]


def _in_range(string_id: int, min_inclusive: int, max_inclusive: int) -> bool:
    return min_inclusive <= string_id <= max_inclusive


def _read_refs(data: bytes, offsets: Iterable[int], filename: str) -> List[int]:
    try:
        return [struct.unpack_from('<i', data, offset)[0] for offset in offsets]
    except struct.error as e:
        raise ParseError(f"{filename} is too short for a string reference: {e}") from e


@dataclass
class ItemStrings:
    filename: str
    general_name: int
    identified_name: int
    general_description: int
    identified_description: int

    @property
    def ids(self) -> List[int]:
        return [self.general_name, self.identified_name, self.general_description, self.identified_description]

    def csv_row(self) -> List[str]:
        return [self.filename] + ["" if i == NO_STRING else str(i) for i in self.ids]


@dataclass
class CreatureStrings:
    filename: str
    short_name: int
    long_name: int
    soundset: List[int] = field(default_factory=list)

    @property
    def ids(self) -> List[int]:
        return [self.short_name, self.long_name] + list(self.soundset)

    def soundset_in_range(self, min_inclusive: int, max_inclusive: int) -> List[int]:
        return sorted({i for i in self.soundset if _in_range(i, min_inclusive, max_inclusive)})

    def csv_row(self, min_inclusive: int, max_inclusive: int) -> List[str]:
        names = ["" if i == NO_STRING else str(i) for i in (self.short_name, self.long_name)]
        return [self.filename] + names + [str(i) for i in self.soundset_in_range(min_inclusive, max_inclusive)]


@dataclass
class TableStrings:
    filename: str
    ids: List[int] = field(default_factory=list)


def sort_key(resource) -> Tuple[List[int], str]:
    """Order by the sorted distinct IDs first, then by file name."""
    return sorted(set(resource.ids)), resource.filename


def is_in_range(resource, min_inclusive: int, max_inclusive: int) -> bool:
    return any(_in_range(i, min_inclusive, max_inclusive) for i in resource.ids)


def parse_item(path: PathLike) -> ItemStrings:
    path = Path(path)
    refs = _read_refs(path.read_bytes(), ITM_OFFSETS, path.name)
    return ItemStrings(path.name, *refs)


def parse_creature(path: PathLike) -> CreatureStrings:
    path = Path(path)
    data = path.read_bytes()
    short_name, long_name = _read_refs(data, CRE_NAME_OFFSETS, path.name)
    soundset_offsets = range(CRE_SOUNDSET_OFFSET, CRE_SOUNDSET_OFFSET + 4 * CRE_SOUNDSET_COUNT, 4)
    return CreatureStrings(path.name, short_name, long_name, _read_refs(data, soundset_offsets, path.name))


def parse_table(path: PathLike) -> TableStrings:
    path = Path(path)
    ids = set()
    for line in read_text_safely(path).splitlines():
        for part in re.split(r' +', line):
            if _INTEGER_RE.match(part):
                ids.add(int(part))
    return TableStrings(path.name, sorted(ids))


def collect(folder: PathLike, extension: str, parser, min_inclusive: int, max_inclusive: int) -> list:
    """Parse every `extension` file of `folder` and keep the ones touching the range."""
    resources = []
    for path in list_files(folder, [extension]):
        logger.info(f"Parse {extension.upper()}: {path.name}")
        resources.append(parser(path))
    kept = [r for r in resources if is_in_range(r, min_inclusive, max_inclusive)]
    logger.info(f"{len(kept)} of {len(resources)} {extension.upper()} files use strings {min_inclusive}-{max_inclusive}")
    if extension.lower() == "2da":
        return sorted(kept, key=lambda r: r.filename)
    return sorted(kept, key=sort_key)


def _write_lines(path: PathLike, lines: Sequence[str]) -> None:
    try:
        with open(path, 'w', encoding='utf-8', newline='\n') as f:
            f.write("\n".join(lines) + "\n" if lines else "")
    except OSError as e:
        raise ReportError(f"Could not write {path}: {e}") from e


def write_id_txt(resources: Sequence, path: PathLike, min_inclusive: int, max_inclusive: int,
                 with_headers: bool = False) -> None:
    """One in-range ID per line, each resource followed by a blank line.

    With `with_headers` every resource starts with a ``// filename`` line.
    """
    lines: List[str] = []
    for resource in resources:
        if with_headers:
            lines.extend([f"// {resource.filename}", ""])
        if isinstance(resource, CreatureStrings):
            names = [i for i in (resource.short_name, resource.long_name) if _in_range(i, min_inclusive, max_inclusive)]
            ids = names + resource.soundset_in_range(min_inclusive, max_inclusive)
        else:
            ids = [i for i in resource.ids if _in_range(i, min_inclusive, max_inclusive)]
        lines.extend(str(i) for i in ids)
        lines.append("")
    _write_lines(path, lines)


def _range_note(min_inclusive: int, max_inclusive: int) -> str:
    return f"The file can include string IDs out of the user-defined string range {min_inclusive}-{max_inclusive}"


def write_items_csv(items: Sequence[ItemStrings], path: PathLike, min_inclusive: int, max_inclusive: int) -> None:
    header = ["ITM File", "General Name", "Identified Name", "General Description", "Identified Description"]
    rows = [
        [_range_note(min_inclusive, max_inclusive), "", "", "", ""],
        ["", "", "", "", ""],
        header,
    ]
    rows.extend(item.csv_row() for item in items)
    _write_csv(path, rows)


def write_creatures_csv(creatures: Sequence[CreatureStrings], path: PathLike,
                        min_inclusive: int, max_inclusive: int) -> None:
    rows = [
        [_range_note(min_inclusive, max_inclusive)],
        [""],
        ["CRE File", "Short Name", "Long Name", "Pertaining Strings"],
    ]
    rows.extend(c.csv_row(min_inclusive, max_inclusive) for c in creatures)
    _write_csv(path, rows)


def _write_csv(path: PathLike, rows: List[List[str]]) -> None:
    try:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator='\n')
            writer.writerows(rows)
    except OSError as e:
        raise ReportError(f"Could not write {path}: {e}") from e


def extract(kind: str, folder: PathLike, min_inclusive: int, max_inclusive: int,
            out_txt: PathLike, out_csv: Optional[PathLike] = None) -> int:
    """Run one extraction (`items`, `creatures` or `tables`); returns the number of resources written."""
    if kind == "items":
        resources = collect(folder, "itm", parse_item, min_inclusive, max_inclusive)
        write_id_txt(resources, out_txt, min_inclusive, max_inclusive)
        if out_csv:
            write_items_csv(resources, out_csv, min_inclusive, max_inclusive)
    elif kind == "creatures":
        resources = collect(folder, "cre", parse_creature, min_inclusive, max_inclusive)
        write_id_txt(resources, out_txt, min_inclusive, max_inclusive)
        if out_csv:
            write_creatures_csv(resources, out_csv, min_inclusive, max_inclusive)
    elif kind == "tables":
        resources = collect(folder, "2da", parse_table, min_inclusive, max_inclusive)
        write_id_txt(resources, out_txt, min_inclusive, max_inclusive, with_headers=True)
    else:
        raise ValueError(f"Unknown resource kind: {kind}")
    logger.info(f"{kind.capitalize()} strings written to '{Path(out_txt).resolve()}'")
    return len(resources)

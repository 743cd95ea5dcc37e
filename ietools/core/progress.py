# -*- coding: utf-8 -*-
"""
Translation Progress Report
===========================

Reads the exports of a translation project (all strings, out-of-date
strings, and optionally the strings the game never uses) and appends one
run to two reports:

- a PNG where every run is a 10 px wide column and every row stands for
  ten consecutive strings, green when all ten are accepted, red otherwise;
- a TXT table with one dated line of counts per run.
"""

import logging
import re
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

from PyQt6.QtGui import QColor, QImage

from ietools.core.exceptions import ReportError
from ietools.utils.encoding import read_text_safely

COLUMN_WIDTH = 10
STRINGS_PER_ROW = 10

GREEN = QColor(0, 255, 0)
RED = QColor(255, 0, 0)
BLACK = QColor(0, 0, 0)

TXT_HEADER = [
    "Date         # Untouched   # Suggested   # Accepted   Progress",
    "-----------+-------------+-------------+------------+---------",
]

PathLike = Union[str, Path]


class IdState(Enum):
    ACCEPTED = "accepted"
    OUT_OF_DATE = "out_of_date"
    UNUSED = "unused"


def read_csv_ids(path: PathLike) -> List[int]:
    """IDs from the first quoted column of a CSV export; other lines are ignored."""
    result = set()
    for line in read_text_safely(path).splitlines():
        first = line[1:].split('","', 1)[0].rstrip('"')
        try:
            result.add(int(first))
        except ValueError:
            continue
    return sorted(result)


def read_unused_ids(path: PathLike) -> List[int]:
    """IDs of a NearInfinity unused-strings export (``StringRef: 123 ...`` lines)."""
    pattern = re.compile(r'^StringRef: (\d+) ')
    result = set()
    for line in read_text_safely(path).splitlines():
        match = pattern.match(line)
        if match:
            result.add(int(match.group(1)))
    return sorted(result)


class ProgressReport:
    """State of every string of a translation project."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.states: Dict[int, Set[IdState]] = {}

    def load(self, complete_ids: Iterable[int], out_of_date_ids: Iterable[int],
             unused_ids: Iterable[int] = ()) -> "ProgressReport":
        self.states = {i: {IdState.ACCEPTED} for i in sorted(complete_ids)}
        for string_id in out_of_date_ids:
            state = self.states.get(string_id)
            if state is None:
                self.logger.warning(f"Out-of-date string {string_id} is missing from the complete export")
                continue
            state.discard(IdState.ACCEPTED)
            state.add(IdState.OUT_OF_DATE)
        for string_id in unused_ids:
            # the unused export covers the whole game, not just this project
            if string_id in self.states:
                self.states[string_id].add(IdState.UNUSED)
        return self

    @classmethod
    def from_files(cls, complete_csv: PathLike, out_of_date_csv: PathLike,
                   unused_txt: Optional[PathLike] = None) -> "ProgressReport":
        unused = read_unused_ids(unused_txt) if unused_txt else []
        return cls().load(read_csv_ids(complete_csv), read_csv_ids(out_of_date_csv), unused)

    def count(self, state: IdState) -> int:
        return sum(1 for s in self.states.values() if state in s)

    def row_flags(self) -> List[bool]:
        """One flag per block of ten strings: True when every string of the block is accepted."""
        ids = sorted(self.states)
        return [
            all(IdState.ACCEPTED in self.states[i] for i in ids[start:start + STRINGS_PER_ROW])
            for start in range(0, len(ids), STRINGS_PER_ROW)
        ]

    def percentage(self, suggestions: int, ignore_unused: bool = False) -> int:
        total = len(self.states) - (self.count(IdState.UNUSED) if ignore_unused else 0)
        if total <= 0:
            raise ReportError("No strings left to compute the progress from")
        return int(100.0 * (suggestions + 2 * self.count(IdState.ACCEPTED)) / (2 * total))

    def paint(self, png_path: PathLike) -> Path:
        """Add a column for this run to `png_path`, creating the image if needed."""
        png_path = Path(png_path)
        flags = self.row_flags()
        if not flags:
            raise ReportError("No strings to paint")

        if png_path.exists():
            old_image = QImage(str(png_path))
            if old_image.isNull():
                raise ReportError(f"Could not read existing image {png_path}")
            old_width = old_image.width()
            height = max(old_image.height(), len(flags))
            # pixels outside the old image come back as zero, i.e. black
            image = old_image.convertToFormat(QImage.Format.Format_RGB32).copy(
                0, 0, old_width + 1 + COLUMN_WIDTH, height
            )
            for y in range(height):
                image.setPixelColor(old_width, y, BLACK)
        else:
            image = QImage(COLUMN_WIDTH, len(flags), QImage.Format.Format_RGB32)
            image.fill(BLACK)

        x_start = image.width() - COLUMN_WIDTH
        for row, accepted in enumerate(flags):
            color = GREEN if accepted else RED
            for x in range(x_start, x_start + COLUMN_WIDTH):
                image.setPixelColor(x, row, color)

        if not image.save(str(png_path), "PNG"):
            raise ReportError(f"Could not write image {png_path}")
        self.logger.info(f"The PNG file has been created in '{png_path.resolve()}'")
        return png_path

    def format_line(self, suggestions: int, ignore_unused: bool = False, day: Optional[date] = None) -> str:
        day = day or date.today()
        accepted = self.count(IdState.ACCEPTED)
        untouched = len(self.states) - accepted - suggestions
        progress = f"{self.percentage(suggestions, ignore_unused)}%"
        return f"{day.isoformat()}   {untouched:>11}   {suggestions:>11}   {accepted:>10}   {progress:>7}"

    def write(self, txt_path: PathLike, suggestions: int, ignore_unused: bool = False,
              day: Optional[date] = None) -> Path:
        """Append this run to the progress table, writing the header for a new file."""
        txt_path = Path(txt_path)
        if txt_path.exists():
            lines = read_text_safely(txt_path).splitlines()
        else:
            lines = list(TXT_HEADER)
        while lines and not lines[-1].strip():
            lines.pop()
        lines.append(self.format_line(suggestions, ignore_unused, day))

        try:
            txt_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as e:
            raise ReportError(f"Could not write {txt_path}: {e}") from e
        self.logger.info(f"The TXT file has been created in '{txt_path.resolve()}'")
        return txt_path

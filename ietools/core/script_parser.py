# -*- coding: utf-8 -*-
"""
Script File Parser
==================

Finds strings that scripts display or write to the journal. Decompiled
scripts carry the text as a trailing comment::

    DisplayStringHead("Imoen",12345)  // Hey, wait for me!
    AddJournalEntry(12346,QUEST)  // The journal text

Strings that a dialog file already registered are left alone. All script
strings of one file become neighbors of each other.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

from ietools.core.dialog_parser import ParseState, ProgressCallback
from ietools.core.strings import StringType
from ietools.utils.encoding import read_text_safely

SCRIPT_TYPES = (StringType.SCRIPT_HEAD, StringType.SCRIPT_JOURNAL)


class ScriptContentParser:
    """Registers script strings and remembers which file they came from."""

    def __init__(self, state: ParseState):
        self.logger = logging.getLogger(__name__)
        self.state = state

        self._add_journal_re = re.compile(r'AddJournalEntry\((\d+),[^)]+\)  // ([^\n]+)')
        self._display_head_re = re.compile(r'DisplayStringHead\("([^"]+)",(\d+)\)  // ([^\n]+)')
        self._display_wait_re = re.compile(r'DisplayStringWait\("([^"]+)",(\d+)\)  // ([^\n]+)')

    def parse(self, file_path: Union[str, Path]) -> List[int]:
        """Parse one script or dialog file; returns the newly registered IDs, sorted."""
        file_path = Path(file_path)
        filename = file_path.name
        content = read_text_safely(file_path)
        registry = self.state.registry
        ids: List[int] = []

        def register(string_id: int, text: str, string_type: StringType) -> None:
            if string_id in registry:
                return
            registry.create(string_id, text.rstrip('\r'), string_type, filename, self.state.sequence)
            ids.append(string_id)

        for match in self._add_journal_re.finditer(content):
            register(int(match.group(1)), match.group(2), StringType.SCRIPT_JOURNAL)
        for pattern in (self._display_head_re, self._display_wait_re):
            for match in pattern.finditer(content):
                register(int(match.group(2)), f"({match.group(1)}) {match.group(3)}", StringType.SCRIPT_HEAD)

        ids.sort()
        if ids:
            self.state.file_ids[filename] = ids
            self.logger.debug(f"{filename}: {len(ids)} script strings")
        return ids


class ScriptStructureParser:
    """Makes all script strings of a file mutual neighbors."""

    def __init__(self, state: ParseState):
        self.logger = logging.getLogger(__name__)
        self.state = state

    def parse(self, file_path: Union[str, Path]) -> int:
        filename = Path(file_path).name
        registry = self.state.registry
        ids = [
            i for i in self.state.file_ids.get(filename, [])
            if i in registry and registry[i].type in SCRIPT_TYPES
        ]
        pairs = 0
        for index, first in enumerate(ids):
            for second in ids[index + 1:]:
                registry.add_neighbors(first, second)
                pairs += 1
        return pairs


def parse_script_files(state: ParseState, files: List[Path],
                       progress: Optional[ProgressCallback] = None) -> None:
    """Run both script passes over `files`."""
    content_parser = ScriptContentParser(state)
    structure_parser = ScriptStructureParser(state)
    total = len(files) * 2
    for index, file_path in enumerate(files, start=1):
        if progress:
            progress(index, total, f"Parse script content: {file_path.name}")
        content_parser.parse(file_path)
    for index, file_path in enumerate(files, start=len(files) + 1):
        if progress:
            progress(index, total, f"Parse script structure: {file_path.name}")
        structure_parser.parse(file_path)

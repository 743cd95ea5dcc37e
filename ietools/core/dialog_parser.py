# -*- coding: utf-8 -*-
"""
Dialog File Parser
==================

Reads decompiled dialog files (WeiDU .d output) in two passes:

1. Content: every SAY, REPLY, JOURNAL and AddJournalEntry string of each
   state block is registered, together with its internal ID.
2. Structure: the transitions of each state block are turned into
   parent/child edges between those strings.

Internal IDs name a string by its place in the dialog file:
``FILE:3`` is the SAY string of state 3, ``FILE:3.0`` its first reply and
``FILE:3.Journal.0`` its first journal entry. GOTO and EXTERN targets are
resolved through them.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from ietools.core.strings import (
    INVALID_REFERENCE_ID, NO_TEXT_PLACEHOLDER, SequenceGenerator, StringRegistry, StringType,
)
from ietools.utils.encoding import read_text_safely

# ~ THEN BEGIN 12 // non-blocking state
BEGIN_RE = re.compile(r'~ THEN BEGIN (\d+)')
# END on a line of its own closes the state block
END_RE = re.compile(r'^END[ \t]*\r?$', re.MULTILINE)

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class ParseState:
    """Everything the parsers build up while reading a folder."""
    registry: StringRegistry = field(default_factory=StringRegistry)
    # upper-cased internal ID -> string ID
    internal_ids: Dict[str, int] = field(default_factory=dict)
    # file name -> string IDs in file order
    file_ids: Dict[str, List[int]] = field(default_factory=dict)
    sequence: SequenceGenerator = field(default_factory=SequenceGenerator)

    def __post_init__(self):
        self.registry.ensure_sentinel()

    def resolve(self, dialog_file: str, state: str) -> int:
        """String ID of `dialog_file:state`, or the invalid reference ID."""
        return self.internal_ids.get(internal_id(dialog_file, state), INVALID_REFERENCE_ID)

    def prune_file_ids(self) -> None:
        """Forget IDs no longer in the registry and files left without IDs."""
        for filename in list(self.file_ids):
            kept = [i for i in self.file_ids[filename] if i in self.registry]
            if kept:
                self.file_ids[filename] = kept
            else:
                del self.file_ids[filename]


def internal_id(dialog_file: str, state: Union[str, int], suffix: str = "") -> str:
    # dialog names are case-insensitive in the game
    return f"{dialog_file.upper()}:{int(state)}{suffix}"


def iter_blocks(content: str) -> Iterator[Tuple[str, str]]:
    """Yield (state number, block body) for every state block of a dialog file."""
    for begin in BEGIN_RE.finditer(content):
        end = END_RE.search(content, begin.end())
        stop = end.start() if end else len(content)
        yield begin.group(1), content[begin.end():stop]


class DialogContentParser:
    """First pass: registers the strings of every state block."""

    def __init__(self, state: ParseState):
        self.logger = logging.getLogger(__name__)
        self.state = state

        # SAY #1234 /* ~Hello there.~ */
        self._say_re = re.compile(r'SAY #(\d+) /\* ~([^~]*)~')
        # IF ~~ THEN REPLY #1235 /* ~Goodbye.~ */
        self._reply_re = re.compile(r'~ THEN REPLY #(\d+) /\* ~([^~]*)~')
        # DO ~AddJournalEntry(1236,QUEST)~ carries no text
        self._add_journal_re = re.compile(r'AddJournalEntry\((\d+)')
        # JOURNAL #1237 /* ~Quest text~ */
        self._journal_re = re.compile(r'JOURNAL #(\d+) /\* ~([^~]*)~')

    def parse(self, file_path: Union[str, Path]) -> int:
        """Parse one dialog file; returns the number of state blocks read."""
        file_path = Path(file_path)
        dialog_file = file_path.stem
        content = read_text_safely(file_path)
        say_ids = self.state.file_ids.setdefault(dialog_file, [])

        blocks = 0
        for state_number, body in iter_blocks(content):
            if self._parse_block(dialog_file, state_number, body, say_ids):
                blocks += 1
        return blocks

    def _register(self, string_id: int, text: str, string_type: StringType, dialog_file: str) -> None:
        self.state.registry.create(string_id, text, string_type, dialog_file, self.state.sequence)

    def _parse_block(self, dialog_file: str, state_number: str, body: str, say_ids: List[int]) -> bool:
        say = self._say_re.search(body)
        if say is None:
            self.logger.warning(f"{dialog_file}: state {state_number} has no SAY string, skipped")
            return False

        block_id = internal_id(dialog_file, state_number)
        say_id = int(say.group(1))
        self._register(say_id, say.group(2), StringType.DIALOG, dialog_file)
        self.state.internal_ids[block_id] = say_id
        say_ids.append(say_id)

        for index, reply in enumerate(self._reply_re.finditer(body)):
            reply_id = int(reply.group(1))
            self._register(reply_id, reply.group(2), StringType.DIALOG, dialog_file)
            self.state.internal_ids[f"{block_id}.{index}"] = reply_id

        # one counter for both kinds of journal entries
        journal_index = 0
        for entry in self._add_journal_re.finditer(body):
            entry_id = int(entry.group(1))
            self._register(entry_id, NO_TEXT_PLACEHOLDER, StringType.JOURNAL, dialog_file)
            self.state.internal_ids[f"{block_id}.Journal.{journal_index}"] = entry_id
            journal_index += 1
        for entry in self._journal_re.finditer(body):
            entry_id = int(entry.group(1))
            self._register(entry_id, entry.group(2), StringType.JOURNAL, dialog_file)
            self.state.internal_ids[f"{block_id}.Journal.{journal_index}"] = entry_id
            journal_index += 1
        return True


class DialogStructureParser:
    """Second pass: links the strings of every state block."""

    def __init__(self, state: ParseState):
        self.logger = logging.getLogger(__name__)
        self.state = state

        self._say_re = re.compile(r'SAY #(\d+)')
        self._reply_re = re.compile(r'REPLY #(\d+)')
        self._goto_re = re.compile(r'GOTO (\d+)')
        self._journal_re = re.compile(r'JOURNAL #(\d+)')
        self._add_journal_re = re.compile(r'AddJournalEntry\((\d+)')
        # EXTERN ~OTHERDLG~ 7
        self._extern_re = re.compile(r'EXTERN ~([^~]*)~ (\d+)')
        # transitions start on lines indented by two spaces
        self._line_split_re = re.compile(r'\r?\n  ')

    def parse(self, file_path: Union[str, Path]) -> int:
        """Parse one dialog file; returns the number of edges added."""
        file_path = Path(file_path)
        dialog_file = file_path.stem
        content = read_text_safely(file_path)

        edges = 0
        for _, body in iter_blocks(content):
            say = self._say_re.search(body)
            if say is None or int(say.group(1)) not in self.state.registry:
                continue
            say_id = int(say.group(1))
            for line in self._line_split_re.split(body):
                edges += self._parse_line(dialog_file, say_id, line)
        return edges

    def _known(self, dialog_file: str, string_id: int) -> int:
        # strings without a text comment were never registered
        if string_id in self.state.registry:
            return string_id
        self.logger.warning(f"{dialog_file}: string {string_id} has no registered text")
        return INVALID_REFERENCE_ID

    def _link(self, parent_id: int, child_id: int) -> int:
        if parent_id == child_id:
            self.logger.debug(f"Ignoring self reference of string {parent_id}")
            return 0
        self.state.registry.add_edge(parent_id, child_id)
        return 1

    def _parse_line(self, dialog_file: str, parent_id: int, line: str) -> int:
        edges = 0

        reply = self._reply_re.search(line)
        if reply:
            reply_id = self._known(dialog_file, int(reply.group(1)))
            edges += self._link(parent_id, reply_id)
            # whatever follows on the line belongs to the reply
            if reply_id != INVALID_REFERENCE_ID:
                parent_id = reply_id

        goto = self._goto_re.search(line)
        if goto:
            target = self.state.resolve(dialog_file, goto.group(1))
            if target == INVALID_REFERENCE_ID:
                self.logger.warning(f"{dialog_file}: GOTO {goto.group(1)} points to an unknown state")
            edges += self._link(parent_id, target)

        journal = self._journal_re.search(line)
        if journal:
            edges += self._link(parent_id, self._known(dialog_file, int(journal.group(1))))

        add_journal = self._add_journal_re.search(line)
        if add_journal:
            edges += self._link(parent_id, self._known(dialog_file, int(add_journal.group(1))))

        extern = self._extern_re.search(line)
        if extern:
            target = self.state.resolve(extern.group(1), extern.group(2))
            if target == INVALID_REFERENCE_ID:
                self.logger.warning(
                    f"{dialog_file}: EXTERN {extern.group(1)} {extern.group(2)} points to an unknown state"
                )
            edges += self._link(parent_id, target)

        return edges


def parse_dialog_files(state: ParseState, files: List[Path],
                       progress: Optional[ProgressCallback] = None) -> None:
    """Run both dialog passes over `files`; `progress(current, total, text)` is optional."""
    content_parser = DialogContentParser(state)
    structure_parser = DialogStructureParser(state)
    total = len(files) * 2
    for index, file_path in enumerate(files, start=1):
        if progress:
            progress(index, total, f"Parse content: {file_path.name}")
        content_parser.parse(file_path)
    for index, file_path in enumerate(files, start=len(files) + 1):
        if progress:
            progress(index, total, f"Parse structure: {file_path.name}")
        structure_parser.parse(file_path)

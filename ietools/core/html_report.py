# -*- coding: utf-8 -*-
"""
HTML Dialog Overview
====================

Writes one page that shows every SAY string of every dialog file together
with the strings leading to it and the replies and journal entries following
it. String IDs link to the block where that string is said, so a translator
can follow a conversation by clicking through it.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Union

from ietools.core.exceptions import ReportError
from ietools.core.strings import StringRegistry, StringType

JUMP_SCRIPT = (
    "function init() { var input = document.getElementById('input'); "
    "input.addEventListener('keypress', function(e) { if (e.key === 'Enter') { "
    "window.location.href = '#id' + input.value; } }); }"
)

STYLE = """\
html { font-family: sans-serif; background-color: rgb(39, 40, 34); color: rgb(255, 255, 255); }
h2 { font-size: 1em; }
p.block { background-color: rgba(255, 255, 255, 0.025); padding: 0.4em; border-radius: 0.1em; display: grid; grid-template-columns: auto 1fr; grid-gap: 0.1em 0.6em; overflow: hidden; white-space: nowrap; }
span.say { color: rgb(174, 129, 255); display: inline-block; padding-bottom: 0.5em; }
span.text { color: rgb(142, 137, 113); display: inline-block; }
span.supporttext { color: rgb(99, 95, 79); display: inline-block; }
span.reply, span.journal, span.script { color: rgb(174, 129, 255); display: inline-block; padding-left: 2em; }
span.error { color: rgb(249, 38, 114); display: inline-block; padding-left: 2em; }
span.idlink { color: rgb(230, 219, 116); text-decoration: none; }
a.idlink { color: rgb(249, 38, 114); text-decoration: none; }
a.idlink:hover { text-decoration: underline; }
span.sayparent { display: inline-block; }
span.replychild { display: inline-block; padding-left: 5.4em; }
span.replyparent, span.journalparent { display: inline-block; padding-left: 2em; }
span.reply + span.text + span.reply, span.reply + span.text + span.reply + span.text, span.journal + span.text + span.reply, span.journal + span.text + span.reply + span.text { padding-top: 0.5em; }
div#search { position: fixed; left: 1em; bottom: 1em; width: 10em; }
input#input { background-color: rgb(39, 40, 34); color: rgb(142, 137, 113); border: 1px solid rgb(99, 95, 79); border-radius: 0.2em; font-size: 1em; padding: 0.1em; }
"""

SCRIPT_TYPES = (StringType.SCRIPT_HEAD, StringType.SCRIPT_JOURNAL)


def _span(parent: ET.Element, css_class: str, text: str = "") -> ET.Element:
    span = ET.SubElement(parent, "span", {"class": css_class})
    span.text = text
    return span


class HtmlReportCreator:
    """Builds the dialog overview page from a parsed registry."""

    def __init__(self, registry: StringRegistry, file_ids: Dict[str, List[int]],
                 title: str = "Dialog/Journal Structure"):
        self.logger = logging.getLogger(__name__)
        self.registry = registry
        self.file_ids = file_ids
        self.title = title

    def create(self) -> str:
        """Return the whole page as text."""
        html = ET.Element("html")
        html.append(self._build_head())
        html.append(self._build_body())
        return "<!DOCTYPE html>\n" + ET.tostring(html, encoding="unicode", method="html")

    def write(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        try:
            path.write_text(self.create(), encoding="utf-8")
        except OSError as e:
            raise ReportError(f"Could not write HTML overview to {path}: {e}") from e
        self.logger.info(f"HTML written to '{path.resolve()}'")
        return path

    def _build_head(self) -> ET.Element:
        head = ET.Element("head")
        ET.SubElement(head, "meta", {"charset": "UTF-8"})
        title = ET.SubElement(head, "title")
        title.text = self.title
        script = ET.SubElement(head, "script")
        script.text = JUMP_SCRIPT
        style = ET.SubElement(head, "style", {"type": "text/css"})
        style.text = STYLE
        return head

    def _build_body(self) -> ET.Element:
        body = ET.Element("body", {"onload": "init();"})
        h1 = ET.SubElement(body, "h1")
        h1.text = self.title
        created = ET.SubElement(body, "p")
        created.text = f"Created on: {datetime.now().isoformat(timespec='seconds')}"
        legend = ET.SubElement(body, "p")
        legend.text = (
            "String IDs in magenta are links to connected strings. Lines marked with ▾ lead to "
            "the SAY string, lines marked with ▸ follow a reply."
        )

        search = ET.SubElement(body, "div", {"id": "search"})
        ET.SubElement(search, "input", {"id": "input", "type": "text", "placeholder": "Jump to string ID"})

        for filename, ids in self.file_ids.items():
            records = [self.registry[i] for i in ids if i in self.registry]
            if not records:
                continue
            if all(r.type in SCRIPT_TYPES for r in records):
                body.append(self._build_script_listing(filename, records))
            else:
                body.append(self._build_blocks(filename, [r.id for r in records]))
        return body

    def _build_blocks(self, filename: str, say_ids: List[int]) -> ET.Element:
        container = ET.Element("div", {"class": "blocks"})
        h2 = ET.SubElement(container, "h2")
        h2.text = f"// File {filename}.d"
        for say_id in say_ids:
            container.append(self._build_block(say_id))
        self.logger.debug(f"HTML blocks for {filename}: {len(say_ids)}")
        return container

    def _add_link_line(self, block: ET.Element, css_class: str, string_id: int, marker: str, viewer: str) -> None:
        holder = _span(block, css_class)
        link = ET.SubElement(holder, "a", {"class": "idlink", "href": f"#id{string_id}"})
        link.text = f"#{string_id}"
        _span(block, "supporttext", f"{marker} {self.registry[string_id].get_text(viewer)}")

    def _build_block(self, say_id: int) -> ET.Element:
        say_record = self.registry[say_id]
        viewer = say_record.source_file
        block = ET.Element("p", {"class": "block"})

        for parent_id in say_record.parents:
            self._add_link_line(block, "sayparent", parent_id, "▾", viewer)

        say = ET.SubElement(block, "span", {"class": "say", "id": f"id{say_id}"})
        say.text = "SAY "
        _span(say, "idlink", f"#{say_id}")
        _span(block, "text", say_record.get_text(viewer))

        for child_id in say_record.children:
            child = self.registry[child_id]
            if child.type is StringType.DIALOG:
                for parent_id in child.parents:
                    if parent_id != say_id:
                        self._add_link_line(block, "replyparent", parent_id, "▾", viewer)
                reply = _span(block, "reply", "REPLY ")
                anchor = _span(reply, "idlink", f"#{child_id}")
                anchor.set("id", f"id{child_id}")
                _span(block, "text", child.get_text(viewer))
                for grandchild_id in child.children:
                    self._add_link_line(block, "replychild", grandchild_id, "▸", viewer)
            elif child.type is StringType.JOURNAL:
                for parent_id in child.parents:
                    if parent_id != say_id:
                        self._add_link_line(block, "journalparent", parent_id, "▾", viewer)
                journal = _span(block, "journal", "JOURNAL ")
                _span(journal, "idlink", f"#{child_id}")
                _span(block, "text", child.get_text(viewer))
            elif child.type is StringType.ERROR:
                _span(block, "error", "ERROR")
                _span(block, "text", child.text)
        return block

    def _build_script_listing(self, filename: str, records) -> ET.Element:
        container = ET.Element("div", {"class": "blocks"})
        h2 = ET.SubElement(container, "h2")
        h2.text = f"// File {filename}"
        block = ET.SubElement(container, "p", {"class": "block"})
        for record in sorted(records, key=lambda r: r.serial):
            line = _span(block, "script", "SCRIPT ")
            anchor = _span(line, "idlink", f"#{record.id}")
            anchor.set("id", f"id{record.id}")
            _span(block, "text", record.text)
        return container

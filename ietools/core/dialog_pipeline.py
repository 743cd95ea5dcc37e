# -*- coding: utf-8 -*-
"""
Dialog Structure Pipeline
=========================

One run: D/BAF files -> string graph -> HTML overview + string groups.

The pipeline reports its stages and progress through Qt signals, so the
same object drives the command line and any front end listening to it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from ietools.core.dialog_parser import ParseState, parse_dialog_files
from ietools.core.exceptions import IEToolsError
from ietools.core.grouping import GroupCreator, GroupKind, write_groups
from ietools.core.html_report import HtmlReportCreator
from ietools.core.script_parser import parse_script_files
from ietools.utils.config import ConfigManager
from ietools.utils.encoding import list_files


class PipelineStage(Enum):
    """Pipeline stages"""
    IDLE = "idle"
    VALIDATING = "validating"
    PARSING = "parsing"
    FILTERING = "filtering"
    WRITING_HTML = "writing_html"
    GROUPING = "grouping"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class PipelineResult:
    """Pipeline result"""
    success: bool
    message: str
    stage: PipelineStage
    stats: Optional[Dict] = None
    output_path: Optional[str] = None
    error: Optional[str] = None


class DialogPipeline(QObject):
    """
    Dialog structure pipeline.

    Flow:
    1. Check folders and the string ID range
    2. Parse D files (content, then structure)
    3. Parse script strings of BAF files, then of D files
    4. Drop strings outside the ID range
    5. Write the HTML overview
    6. Write the string groups
    """

    # Signals
    stage_changed = pyqtSignal(str, str)  # stage, message
    progress_updated = pyqtSignal(int, int, str)  # current, total, text
    log_message = pyqtSignal(str, str)  # level, message
    finished = pyqtSignal(object)  # PipelineResult

    def __init__(self, config: ConfigManager, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self.config = config

        # State
        self.current_stage = PipelineStage.IDLE
        self.is_running = False
        self.state: Optional[ParseState] = None

    def _set_stage(self, stage: PipelineStage, message: str = ""):
        """Change stage and notify listeners"""
        self.current_stage = stage
        self.stage_changed.emit(stage.value, message)
        self.log_message.emit("info", f"[{stage.value.upper()}] {message}")

    def _progress(self, current: int, total: int, text: str):
        self.progress_updated.emit(current, total, text)

    def run(self) -> PipelineResult:
        """Run the pipeline"""
        self.is_running = True
        try:
            result = self._run_pipeline()
        except IEToolsError as e:
            self.logger.error(f"Pipeline failed: {e}")
            result = PipelineResult(
                success=False,
                message=str(e),
                stage=PipelineStage.ERROR,
                error=str(e)
            )
        except Exception as e:
            self.logger.exception("Pipeline error")
            result = PipelineResult(
                success=False,
                message=f"Unexpected error: {str(e)}",
                stage=PipelineStage.ERROR,
                error=str(e)
            )
        finally:
            self.is_running = False

        if not result.success:
            self.current_stage = PipelineStage.ERROR
            self.log_message.emit("error", result.message)
        self.finished.emit(result)
        return result

    def _run_pipeline(self) -> PipelineResult:
        settings = self.config.dialog_settings
        output = self.config.output_settings

        # 1. Validation
        self._set_stage(PipelineStage.VALIDATING, "Checking input folders")
        settings.validate()
        d_folder = Path(settings.d_folder) if settings.d_folder else None
        baf_folder = Path(settings.baf_folder) if settings.baf_folder else d_folder
        if d_folder is None or not d_folder.is_dir():
            return PipelineResult(
                success=False,
                message=f"D folder not found: {settings.d_folder}",
                stage=PipelineStage.ERROR
            )
        if baf_folder is None or not baf_folder.is_dir():
            return PipelineResult(
                success=False,
                message=f"BAF folder not found: {settings.baf_folder}",
                stage=PipelineStage.ERROR
            )

        d_files = list_files(d_folder, ["d"])
        baf_files = list_files(baf_folder, ["baf"])
        if not d_files and not baf_files:
            return PipelineResult(
                success=False,
                message=f"No D or BAF files found in {d_folder}",
                stage=PipelineStage.ERROR
            )

        # 2./3. Parsing
        self._set_stage(PipelineStage.PARSING, f"Parsing {len(d_files)} D and {len(baf_files)} BAF files")
        state = ParseState()
        self.state = state
        parse_dialog_files(state, d_files, self._progress)
        parse_script_files(state, baf_files, self._progress)
        parse_script_files(state, d_files, self._progress)
        parsed = len(state.registry)
        self.log_message.emit("info", f"Parsed {parsed} strings")

        # 4. Range filter
        min_id = settings.string_id_from
        max_id = settings.string_id_to
        if max_id is None:
            max_id = max([min_id] + state.registry.ids())
        self._set_stage(PipelineStage.FILTERING, f"Keeping strings {min_id}-{max_id}")
        removed = state.registry.chop_to_range(min_id, max_id)
        state.prune_file_ids()

        out_dir = Path(output.output_directory)
        out_dir.mkdir(parents=True, exist_ok=True)

        # 5. HTML
        self._set_stage(PipelineStage.WRITING_HTML, "Writing HTML overview")
        html_path = HtmlReportCreator(state.registry, state.file_ids).write(out_dir / output.html_file)

        # 6. Groups
        self._set_stage(PipelineStage.GROUPING, "Creating string groups")
        groups = GroupCreator(state.registry, min_id, max_id).create()
        groups_path = out_dir / output.groups_file
        write_groups(groups, groups_path)
        self.log_message.emit("info", f"Groups written to '{groups_path.resolve()}'")

        stats = {
            'files': len(d_files) + len(baf_files),
            'strings': parsed,
            'removed': len(removed),
            'kept': len(state.registry),
            'dialog_groups': sum(1 for g in groups if g.kind is GroupKind.DIALOG),
            'script_groups': sum(1 for g in groups if g.kind is GroupKind.SCRIPT),
            'not_used': len(groups[-1].ids),
            'html': str(html_path),
            'groups': str(groups_path),
        }
        self._set_stage(PipelineStage.COMPLETED, "Done")
        return PipelineResult(
            success=True,
            message=f"{stats['kept']} strings in {stats['dialog_groups'] + stats['script_groups']} groups",
            stage=PipelineStage.COMPLETED,
            stats=stats,
            output_path=str(out_dir)
        )

"""
Core module for IE Translation Tools
====================================
"""

from .strings import StringType, StringRecord, StringRegistry, SequenceGenerator
from .dialog_parser import ParseState, DialogContentParser, DialogStructureParser, parse_dialog_files
from .script_parser import ScriptContentParser, ScriptStructureParser, parse_script_files
from .linearizer import (
    LinearizeResult, AcyclicDialogLinearizer, CyclicDialogLinearizer, DialogLinearizer, ScriptLinearizer,
    has_cycle, linearize_dialog
)
from .grouping import GroupCreator, GroupKind, StringGroup, format_groups, write_groups
from .html_report import HtmlReportCreator

__all__ = [
    'StringType', 'StringRecord', 'StringRegistry', 'SequenceGenerator',
    'ParseState', 'DialogContentParser', 'DialogStructureParser', 'parse_dialog_files',
    'ScriptContentParser', 'ScriptStructureParser', 'parse_script_files',
    'LinearizeResult', 'AcyclicDialogLinearizer', 'CyclicDialogLinearizer', 'DialogLinearizer', 'ScriptLinearizer',
    'has_cycle', 'linearize_dialog',
    'GroupCreator', 'GroupKind', 'StringGroup', 'format_groups', 'write_groups',
    'HtmlReportCreator'
]

# -*- coding: utf-8 -*-
"""
IE Translation Tools CLI Main Module
"""

import sys
import argparse
import signal
import json
import logging
from pathlib import Path

from PyQt6.QtCore import QCoreApplication, QTimer, QObject, pyqtSlot

from ietools.core.dialog_pipeline import DialogPipeline, PipelineResult
from ietools.core.exceptions import IEToolsError
from ietools.core import resources
from ietools.utils.config import ConfigManager
from ietools.version import VERSION


class CliHandler(QObject):
    """Handles CLI events and pipeline signals."""

    def __init__(self, pipeline: DialogPipeline, verbose: bool = False):
        super().__init__()
        self.pipeline = pipeline
        self.verbose = verbose
        self.exit_code = 0

        # Connect signals
        self.pipeline.stage_changed.connect(self.on_stage_changed)
        self.pipeline.progress_updated.connect(self.on_progress_updated)
        self.pipeline.log_message.connect(self.on_log_message)
        self.pipeline.finished.connect(self.on_finished)

    @pyqtSlot(str, str)
    def on_stage_changed(self, stage: str, message: str):
        print(f"\n>> STAGE: {message} ({stage})")

    @pyqtSlot(int, int, str)
    def on_progress_updated(self, current: int, total: int, text: str):
        percent = 0
        if total > 0:
            percent = int((current / total) * 100)

        sys.stdout.write(f"\rProgress: [{current}/{total}] {percent}% - {text[:50].ljust(50)}")
        sys.stdout.flush()

    @pyqtSlot(str, str)
    def on_log_message(self, level: str, message: str):
        if self.verbose or level in ["warning", "error", "critical"]:
            print(f"\n[{level.upper()}] {message}")

    @pyqtSlot(object)
    def on_finished(self, result: PipelineResult):
        print("\n" + "="*60)
        if result.success:
            print("SUCCESS")
            print(result.message)
            if result.stats:
                print("\nStatistics:")
                print(f"  Files:         {result.stats.get('files', 0)}")
                print(f"  Strings:       {result.stats.get('kept', 0)} of {result.stats.get('strings', 0)}")
                print(f"  Dialog groups: {result.stats.get('dialog_groups', 0)}")
                print(f"  Script groups: {result.stats.get('script_groups', 0)}")
                print(f"  Unused IDs:    {result.stats.get('not_used', 0)}")
                print(f"\n  HTML:   {result.stats.get('html')}")
                print(f"  Groups: {result.stats.get('groups')}")
        else:
            self.exit_code = 1
            print("FAILED")
            print(result.message)
            if result.error:
                print(f"Details: {result.error}")
        print("="*60)

        QCoreApplication.quit()


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def load_config_override(config_path: str) -> dict:
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error loading config file {config_path}: {e}")
        return {}


def print_header():
    """Print the CLI header."""
    print("\n" + "="*60)
    print(f"       IE Translation Tools CLI v{VERSION}")
    print("       Infinity Engine Translation Helpers")
    print("="*60)


# ============================================================================
# COMMAND HANDLERS
# ============================================================================

def run_resources_command(args) -> int:
    """Extract the string IDs of ITM, CRE or 2DA files."""
    print_header()
    print(f"\n  {args.command.upper()}")
    print("  " + "-"*40)

    folder = Path(args.folder)
    if not folder.is_dir():
        print(f"  Error: Folder not found: {folder}")
        return 1
    if args.string_id_from < 0 or args.string_id_from > args.string_id_to:
        print(f"  Error: Invalid string ID range {args.string_id_from}-{args.string_id_to}")
        return 1

    out_csv = getattr(args, 'out_csv', None)
    try:
        count = resources.extract(
            args.command, folder, args.string_id_from, args.string_id_to, args.out_txt, out_csv
        )
    except IEToolsError as e:
        print(f"  Error: {e}")
        return 1

    print(f"  Files using strings {args.string_id_from}-{args.string_id_to}: {count}")
    print(f"  TXT: {Path(args.out_txt).resolve()}")
    if out_csv:
        print(f"  CSV: {Path(out_csv).resolve()}")
    return 0


def run_progress_command(args) -> int:
    """Append a translation progress column and table line."""
    # QtGui only loads for this command
    from ietools.core.progress import ProgressReport

    print_header()
    print("\n  PROGRESS")
    print("  " + "-"*40)

    for path in (args.complete_csv, args.out_of_date_csv):
        if not Path(path).is_file():
            print(f"  Error: File not found: {path}")
            return 1
    if args.unused_txt and not Path(args.unused_txt).is_file():
        print(f"  Error: File not found: {args.unused_txt}")
        return 1

    try:
        report = ProgressReport.from_files(args.complete_csv, args.out_of_date_csv, args.unused_txt)
        if args.out_png:
            report.paint(args.out_png)
        if args.out_txt:
            report.write(args.out_txt, args.suggestions, ignore_unused=args.ignore_unused)
        line = report.format_line(args.suggestions, ignore_unused=args.ignore_unused)
    except IEToolsError as e:
        print(f"  Error: {e}")
        return 1

    print(f"  {line}")
    return 0


def build_dialog_config(args) -> ConfigManager:
    """Settings for the dialogs command: config.json, then --config, then explicit options."""
    config_manager = ConfigManager()

    # 1. Load external config if provided
    if args.config:
        config_manager.apply_overrides(load_config_override(args.config))

    # 2. Apply explicit CLI args (priority over config file)
    dialog = config_manager.dialog_settings
    output = config_manager.output_settings
    if args.d_folder:
        dialog.d_folder = args.d_folder
    if args.baf_folder:
        dialog.baf_folder = args.baf_folder
    if args.string_id_from is not None:
        dialog.string_id_from = args.string_id_from
    if args.string_id_to is not None:
        dialog.string_id_to = args.string_id_to
    if args.output_dir:
        output.output_directory = args.output_dir
    if args.out_html:
        output.html_file = args.out_html
    if args.out_txt:
        output.groups_file = args.out_txt
    if args.verbose:
        config_manager.app_settings.verbose = True

    if args.save_config:
        config_manager.save_config()
    return config_manager


def run_dialogs_command(args) -> int:
    """Run the dialog structure pipeline inside a Qt event loop."""
    config_manager = build_dialog_config(args)
    dialog = config_manager.dialog_settings

    if not dialog.d_folder:
        print("Error: No D folder given (use --d-folder or a config file)")
        return 1

    print_header()
    print(f"D folder:   {Path(dialog.d_folder).resolve()}")
    print(f"BAF folder: {Path(dialog.baf_folder or dialog.d_folder).resolve()}")
    range_end = dialog.string_id_to if dialog.string_id_to is not None else "last"
    print(f"Strings:    {dialog.string_id_from}-{range_end}")
    print("-" * 40)

    app = QCoreApplication(sys.argv)
    app.setApplicationName("IEToolsCLI")
    app.setApplicationVersion(VERSION)

    pipeline = DialogPipeline(config_manager)
    handler = CliHandler(pipeline, verbose=config_manager.app_settings.verbose)

    QTimer.singleShot(0, pipeline.run)

    # Setup signal handling for graceful exit (Ctrl+C)
    signal.signal(signal.SIGINT, lambda *_: QCoreApplication.quit())

    app.exec()
    return handler.exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"IE Translation Tools V{VERSION} CLI")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # DIALOGS command
    dialogs_parser = subparsers.add_parser('dialogs', help='Build the dialog overview and string groups')
    dialogs_parser.add_argument("--d-folder", help="Folder with decompiled D files")
    dialogs_parser.add_argument("--baf-folder", help="Folder with decompiled BAF files (default: D folder)")
    dialogs_parser.add_argument("--string-id-from", type=int, default=None, help="First string ID (default: 0)")
    dialogs_parser.add_argument("--string-id-to", type=int, default=None,
                                help="Last string ID (default: highest parsed ID)")
    dialogs_parser.add_argument("--output-dir", "-o", help="Output directory (default: current directory)")
    dialogs_parser.add_argument("--out-html", help="HTML file name (default: DialogOverview.html)")
    dialogs_parser.add_argument("--out-txt", help="Groups file name (default: DialogGroups.txt)")
    dialogs_parser.add_argument("--config", help="Path to JSON configuration file")
    dialogs_parser.add_argument("--save-config", action="store_true",
                                help="Store the resulting settings in config.json for later runs")

    # ITEMS / CREATURES / TABLES commands
    resource_help = {
        'items': 'List string IDs of ITM files',
        'creatures': 'List string IDs of CRE files',
        'tables': 'List string IDs of 2DA files',
    }
    for name, help_text in resource_help.items():
        resource_parser = subparsers.add_parser(name, help=help_text)
        resource_parser.add_argument("folder", help="Folder with the resource files")
        resource_parser.add_argument("--from", dest="string_id_from", type=int, required=True,
                                     help="First string ID")
        resource_parser.add_argument("--to", dest="string_id_to", type=int, required=True,
                                     help="Last string ID")
        resource_parser.add_argument("--out-txt", default=f"{name.capitalize()}.txt",
                                     help="Output TXT file")
        if name != 'tables':
            resource_parser.add_argument("--out-csv", help="Optional CSV overview")

    # PROGRESS command
    progress_parser = subparsers.add_parser('progress', help='Add a run to the translation progress reports')
    progress_parser.add_argument("--complete-csv", required=True, help="CSV export of all strings")
    progress_parser.add_argument("--out-of-date-csv", required=True, help="CSV export of out-of-date strings")
    progress_parser.add_argument("--unused-txt", help="NearInfinity export of unused strings")
    progress_parser.add_argument("--suggestions", type=int, default=0, help="Number of suggested strings")
    progress_parser.add_argument("--ignore-unused", action="store_true",
                                 help="Leave unused strings out of the percentage")
    progress_parser.add_argument("--out-png", default="Progress.png", help="Progress image")
    progress_parser.add_argument("--out-txt", default="Progress.txt", help="Progress table")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    if args.command == 'dialogs':
        return run_dialogs_command(args)
    elif args.command in ('items', 'creatures', 'tables'):
        return run_resources_command(args)
    elif args.command == 'progress':
        return run_progress_command(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())

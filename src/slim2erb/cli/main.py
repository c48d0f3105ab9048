#!/usr/bin/env python3
"""
SLIM2ERB CLI
------------
Command-line front end for the converter.

    slim2erb convert PATH    convert a .slim file or every .slim file under a directory
    slim2erb preview PATH    print the generated ERB without touching the disk

Author: Slim2ERB Team
Date: 2026-10-18
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from slim2erb import __version__
from slim2erb.cli.formatter import Slim2ErbFormatter
from slim2erb.cli.progress import ProgressTracker
from slim2erb.core import files
from slim2erb.core.config import ConversionConfig, find_config, load_config
from slim2erb.core.engine import ConversionEngine
from slim2erb.core.errors import ConfigurationError, ReadError

# Global console for consistent styling across the application
console = Console()

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_USAGE = 2


class Slim2ErbCLI:
    """
    Translates user commands into engine actions, with progress, safety
    confirmation for batches and an aggregated report at the end.
    """

    def __init__(self, console: Console = console):
        self.console = console
        self.formatter = Slim2ErbFormatter(console)
        self.parser = argparse.ArgumentParser(
            prog="slim2erb",
            description="Slim2ERB - Convert Slim templates to ERB",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _add_generator_flags(self, parser: argparse.ArgumentParser):
        parser.add_argument("--config", help="Path to a .slim2erb.yaml config file")
        parser.add_argument("--indent-size", type=int, help="Output spaces per column of Slim indentation")
        parser.add_argument("--no-comments", action="store_true", help="Drop '/' comments from the output")
        parser.add_argument("--void-elements", action="store_true", help="Render empty <br>, <img>, ... without closing tags")
        parser.add_argument("--ext", help="Source file extension (default: .slim)")
        parser.add_argument("--diff", action="store_true", help="Show a diff against the existing .erb file")

    def _setup_args(self):
        self.parser.add_argument("--version", action="version", version=f"slim2erb v{__version__}")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        convert_parser = subparsers.add_parser("convert", help="Convert Slim files to ERB")
        convert_parser.add_argument("path", help="Path to a .slim file or a directory")
        self._add_generator_flags(convert_parser)
        convert_parser.add_argument("--output-dir", help="Write .erb files into this directory")
        convert_parser.add_argument("--no-backup", action="store_true", help="Do not keep a .backup copy of the source")
        convert_parser.add_argument("--delete-original", action="store_true", help="Remove the .slim file after converting")
        convert_parser.add_argument("--dry-run", action="store_true", help="Convert without writing anything")
        convert_parser.add_argument("-y", "--yes", action="store_true", help="Skip the batch confirmation prompt")
        convert_parser.add_argument("--force", action="store_true", help="Write even if the generated ERB fails validation")

        preview_parser = subparsers.add_parser("preview", help="Show generated ERB without writing")
        preview_parser.add_argument("path", help="Path to a .slim file or a directory")
        self._add_generator_flags(preview_parser)

    def print_header(self, subtitle: str):
        self.console.print(Panel.fit(
            f"[bold cyan]Slim2ERB v{__version__}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan",
        ))

    def _configure_logging(self, verbose: bool):
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=self.console, show_path=False)],
            force=True,
        )

    def _load_config(self, args: argparse.Namespace) -> ConversionConfig:
        config_path = Path(args.config) if args.config else find_config(Path(args.path))
        if args.config and not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}", file_path=str(config_path))
        config = load_config(config_path)
        return config.with_overrides(
            indent_size=args.indent_size,
            emit_comments=False if args.no_comments else None,
            void_elements=True if args.void_elements else None,
            extension=args.ext,
            output_directory=getattr(args, "output_dir", None),
            create_backup=False if getattr(args, "no_backup", False) else None,
            delete_original=True if getattr(args, "delete_original", False) else None,
        )

    def _collect_targets(self, path: Path, extension: str) -> List[Path]:
        if path.is_file():
            return [path]
        return files.find_sources(path, extension)

    def _confirm_action(self, target_count: int, args: argparse.Namespace) -> bool:
        """Batch safety gate."""
        if args.dry_run or args.yes or target_count <= 1:
            return True
        choice = self.console.input(
            f"\n[bold yellow]Convert {target_count} files to ERB? (y/N): [/bold yellow]"
        ).lower()
        return choice == "y"

    def _scan_root(self, args: argparse.Namespace) -> Optional[Path]:
        path = Path(args.path)
        return path if path.is_dir() else None

    def _read_existing(self, target: Path) -> str:
        if not target.is_file():
            return ""
        try:
            return target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return ""

    def _prepare(self, args: argparse.Namespace):
        input_path = Path(args.path)
        if not input_path.exists():
            self.console.print(f"[bold red]Error:[/bold red] Path '{args.path}' not found.")
            return None

        try:
            config = self._load_config(args)
            targets = self._collect_targets(input_path, config.extension)
        except (ConfigurationError, ReadError) as e:
            self.console.print(f"[bold red]{e.error_type.value}:[/bold red] {e.message}")
            return None

        if not targets:
            self.console.print(f"\n[bold yellow]No {config.extension} files found.[/bold yellow]")
            return None
        return config, targets

    def _run_convert(self, args: argparse.Namespace) -> int:
        prepared = self._prepare(args)
        if prepared is None:
            return EXIT_USAGE
        config, targets = prepared

        if not self._confirm_action(len(targets), args):
            self.console.print("[bold red]Operation cancelled by user.[/bold red]")
            return EXIT_OK

        engine = ConversionEngine(config)
        root = self._scan_root(args)
        existing = {}
        if args.diff:
            existing = {
                path: self._read_existing(files.output_path_for(path, config.output_directory, root))
                for path in targets
            }

        with ProgressTracker(self.console) as tracker:
            tracker.initialize(len(targets), "Converting Slim files...")

            def on_file(processed: int, total: int, file_path: Path, report: Dict):
                if args.diff and report.get("output") is not None:
                    tracker.progress.stop()
                    self.formatter.display_diff(existing[file_path], report["output"], file_path.name)
                    tracker.progress.start()
                tracker.engine_callback(processed, total, file_path, report)

            reports = engine.convert_files(targets, dry_run=args.dry_run, force_write=args.force,
                                           progress_callback=on_file, root=root)
            tracker.report_complete(f"Processed {len(reports)} file(s)")

        self.formatter.print_final_table(reports)
        if engine.collector.has_errors():
            self.formatter.show_issues(engine.collector.issues)
        summary = engine.generate_summary(reports)
        self.formatter.print_summary(summary, dry_run=args.dry_run)
        return EXIT_FAILURES if summary["failed"] else EXIT_OK

    def _run_preview(self, args: argparse.Namespace) -> int:
        prepared = self._prepare(args)
        if prepared is None:
            return EXIT_USAGE
        config, targets = prepared

        engine = ConversionEngine(config)
        failed = 0
        root = self._scan_root(args)
        for file_path in targets:
            report = engine.convert_file(file_path, dry_run=True, force_write=True, root=root)
            if report.get("output") is None:
                failed += 1
                self.console.print(f"[bold red]Error in {file_path.name}:[/bold red] {report.get('error')}")
                continue

            if args.diff:
                existing = self._read_existing(files.output_path_for(file_path, config.output_directory, root))
                self.formatter.display_diff(existing, report["output"], file_path.name)
            else:
                self.formatter.show_preview(report["output"], file_path.name)

        if engine.collector.has_errors():
            self.formatter.show_issues(engine.collector.issues)
        return EXIT_FAILURES if failed else EXIT_OK

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("Slim to ERB Converter")
            self.parser.print_help()
            return EXIT_OK

        args = self.parser.parse_args(argv)
        self._configure_logging(args.verbose)

        if args.command == "convert":
            self.print_header("Convert")
            return self._run_convert(args)
        if args.command == "preview":
            self.print_header("Preview")
            return self._run_preview(args)

        self.parser.print_help()
        return EXIT_USAGE


def main(argv: Optional[List[str]] = None):
    """Application entry point with interrupt handling."""
    try:
        code = Slim2ErbCLI().run(argv)
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()

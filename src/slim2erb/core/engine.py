#!/usr/bin/env python3
"""
SLIM2ERB ENGINE - The Batch Driver
----------------------------------
The ConversionEngine manages the lifecycle of a Slim file: validation of
the input path, reading, conversion, the output gate, and the write with
its backup / delete-original policy.

Every per-file failure is caught, recorded in the ErrorCollector and
turned into a report, so a directory run always finishes.

Author: Slim2ERB Team
Date: 2026-10-18
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from slim2erb.conversion.pipeline import ConversionPipeline
from slim2erb.core import files
from slim2erb.core.config import ConversionConfig
from slim2erb.core.errors import (
    ConversionIssue,
    ErrorCollector,
    ErrorType,
    ReadError,
    Slim2ErbError,
    ValidationError,
    WriteError,
)

logger = logging.getLogger("slim2erb.engine")

ProgressCallback = Callable[[int, int, Path, Dict[str, Any]], None]


class ConversionEngine:
    """
    Principal orchestrator for Slim -> ERB conversion of files on disk.
    """

    def __init__(self, config: Optional[ConversionConfig] = None,
                 collector: Optional[ErrorCollector] = None):
        self.config = (config or ConversionConfig()).validate()
        self.collector = collector or ErrorCollector()
        self.pipeline = ConversionPipeline(self.config.to_generator_options())

    def convert_text(self, source: str) -> str:
        return self.pipeline.run(source).output

    def convert_file(self, path: Union[str, Path], dry_run: bool = False,
                     force_write: bool = False,
                     root: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Performs a full read / convert / check / write cycle on one file.
        `root` is the scanned directory the file was found under; with an
        output_directory, its subdirectories are recreated there.
        """
        source = Path(path)
        display_path = str(source)

        if not source.name.lower().endswith(self.config.extension.lower()):
            error = ValidationError(f"Not a {self.config.extension} file", file_path=display_path)
            self.collector.add_exception(error)
            return self._file_error(display_path, "VALIDATION_ERROR", error.message)

        if not source.is_file():
            error = ReadError(f"Path missing: {source}", file_path=display_path)
            self.collector.add_exception(error)
            return self._file_error(display_path, "READ_ERROR", error.message)

        try:
            # Phase 1: Read (BOM-aware)
            raw_text = files.read_source(source)

            # Phase 2: Conversion
            context = self.pipeline.run(raw_text, file_path=display_path)
            self.collector.add_diagnostics(context.diagnostics, display_path)
        except ReadError as e:
            self.collector.add_exception(e)
            return self._file_error(display_path, "READ_ERROR", e.message)
        except Exception as e:
            logger.error(f"Error processing {display_path}: {e}")
            issue = self.collector.handle_unexpected(e, "conversion", display_path)
            return self._file_error(display_path, "ENGINE_ERROR", issue.message)

        target = files.output_path_for(source, self.config.output_directory, root)
        result = {
            "file_path": display_path,
            "output_path": str(target),
            "success": True,
            "status": "PREVIEW" if dry_run else "CONVERTED",
            "written": False,
            "backup_created": None,
            "deleted_original": False,
            "output": context.output,
            "diagnostics": list(context.diagnostics),
            "validation_errors": list(context.validation_errors),
            "error": None,
            "timestamp": time.time(),
        }

        # Phase 3: Output gate
        if not context.is_valid:
            self.collector.add(ConversionIssue(
                ErrorType.VALIDATION_ERROR,
                f"Generated ERB is unbalanced: {context.validation_errors[0]}",
                display_path,
            ))
            if not force_write:
                result.update(success=False, status="INVALID_OUTPUT", error=context.validation_errors[0])
                return result

        if dry_run:
            return result

        if target.is_file() and not self.config.delete_original:
            try:
                if target.read_text(encoding="utf-8") == context.output:
                    result["status"] = "UNCHANGED"
                    return result
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Cannot compare with existing {target}, rewriting: {e}")

        # Phase 4: Write
        try:
            written = files.write_output(
                source,
                context.output,
                create_backup_copy=self.config.create_backup,
                delete_original=self.config.delete_original,
                output_directory=self.config.output_directory,
                root=root,
            )
        except Slim2ErbError as e:
            self.collector.add_exception(e)
            result.update(success=False, status="WRITE_ERROR", error=e.message)
            return result

        result.update(
            written=True,
            output_path=str(written["output_path"]),
            backup_created=str(written["backup_path"]) if written["backup_path"] else None,
            deleted_original=written["deleted_original"],
        )
        return result

    def convert_directory(self, directory: Union[str, Path], dry_run: bool = False,
                          force_write: bool = False,
                          progress_callback: Optional[ProgressCallback] = None) -> List[Dict[str, Any]]:
        """
        Recursively discovers and converts every source file under
        `directory`. One file's failure never stops the batch.
        """
        try:
            sources = files.find_sources(directory, self.config.extension)
        except ReadError as e:
            self.collector.add_exception(e)
            return [self._file_error(str(directory), "READ_ERROR", e.message)]

        return self.convert_files(sources, dry_run=dry_run, force_write=force_write,
                                  progress_callback=progress_callback, root=directory)

    def convert_files(self, sources: List[Path], dry_run: bool = False, force_write: bool = False,
                      progress_callback: Optional[ProgressCallback] = None,
                      root: Optional[Union[str, Path]] = None) -> List[Dict[str, Any]]:
        """
        Converts `sources` in order. Two sources that map to the same .erb
        file are never both written: the later one is a WRITE_ERROR.
        """
        reports = []
        total = len(sources)
        claimed: Dict[Path, Path] = {}

        for processed, source in enumerate(sources, 1):
            target = files.output_path_for(source, self.config.output_directory, root).resolve()
            if target in claimed:
                error = WriteError(f"Output {target} already produced from {claimed[target]}",
                                   file_path=str(source))
                self.collector.add_exception(error)
                report = self._file_error(str(source), "WRITE_ERROR", error.message)
            else:
                claimed[target] = Path(source)
                report = self._convert_in_batch(source, dry_run, force_write, root)
            reports.append(report)

            if progress_callback:
                progress_callback(processed, total, source, report)

        return reports

    def _convert_in_batch(self, source: Path, dry_run: bool, force_write: bool,
                          root: Optional[Union[str, Path]]) -> Dict[str, Any]:
        try:
            return self.convert_file(source, dry_run=dry_run, force_write=force_write, root=root)
        except Exception as e:
            logger.error(f"Critical error in batch loop for {source}: {e}")
            issue = self.collector.handle_unexpected(e, "batch conversion", str(source))
            return self._file_error(str(source), "ENGINE_ERROR", issue.message)

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Aggregated success / error counts for the final report."""
        total = len(reports)
        successful = sum(1 for r in reports if r.get("success", False))
        return {
            "total_files": total,
            "successful": successful,
            "failed": total - successful,
            "success_rate": (successful / total) if total > 0 else 0,
            "written_to_disk": sum(1 for r in reports if r.get("written", False)),
            "backups_created": sum(1 for r in reports if r.get("backup_created")),
            "originals_deleted": sum(1 for r in reports if r.get("deleted_original")),
            "issues_by_type": self.collector.summary(),
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _file_error(self, path: str, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": path, "status": status, "error": error,
            "success": False, "written": False, "backup_created": None,
            "deleted_original": False, "output": None, "diagnostics": [],
            "validation_errors": [],
        }

# src/slim2erb/cli/progress.py
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressTracker:
    """
    Step / error / complete notifications for a conversion run, keyed by
    file path and drawn as a rich progress bar. Knows nothing about the
    parser or generator.
    """

    def __init__(self, console: Console):
        self.console = console
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
        )
        self.task_id = None
        self.current_step = 0
        self.total_steps = 0
        self.errors = 0

    def __enter__(self) -> "ProgressTracker":
        self.progress.start()
        return self

    def __exit__(self, *exc_info):
        self.progress.stop()

    def initialize(self, total_steps: int, message: str = "Starting conversion..."):
        self.total_steps = total_steps
        self.current_step = 0
        self.errors = 0
        self.task_id = self.progress.add_task(message, total=total_steps)

    def report_step(self, message: str, file_path: Optional[Path] = None):
        self.current_step += 1
        label = f"{message}: {Path(file_path).name}" if file_path else message
        self.progress.update(
            self.task_id,
            advance=1,
            description=f"{label} ({self.current_step}/{self.total_steps})",
        )

    def report_error(self, message: str, file_path: Optional[Path] = None):
        self.errors += 1
        where = f" in {Path(file_path).name}" if file_path else ""
        self.progress.console.print(f"[bold red]Error{where}:[/bold red] {message}")

    def report_complete(self, message: str = "Conversion complete"):
        self.progress.update(self.task_id, completed=self.total_steps, description=message)

    def engine_callback(self, processed: int, total: int, file_path: Path, report: Dict[str, Any]):
        """Adapter matching ConversionEngine's progress_callback signature."""
        if not report.get("success"):
            self.report_error(report.get("error") or report.get("status", "FAILED"), file_path)
        self.report_step("Converted", file_path)

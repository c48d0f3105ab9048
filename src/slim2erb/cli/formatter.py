# src/slim2erb/cli/formatter.py
import difflib
from typing import Any, Dict, List

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from slim2erb.core.errors import ConversionIssue


class Slim2ErbFormatter:
    """
    The visual side of the CLI: previews, diffs, issue lists and the
    execution report.
    """

    def __init__(self, console: Console):
        self.console = console

    def show_preview(self, erb_text: str, file_name: str):
        """Renders generated ERB with syntax highlighting."""
        syntax = Syntax(erb_text, "html+erb", theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=f"ERB Preview: {file_name}", border_style="cyan"))

    def display_diff(self, original_text: str, converted_text: str, file_name: str):
        """
        Unified diff between an existing .erb file and the freshly
        generated one.
        """
        diff_list = list(difflib.unified_diff(
            original_text.splitlines(),
            converted_text.splitlines(),
            fromfile=f"existing/{file_name}",
            tofile=f"generated/{file_name}",
            lineterm="",
        ))

        if not diff_list:
            self.console.print(f"[dim]No changes for {file_name}.[/dim]")
            return

        syntax = Syntax("\n".join(diff_list), "diff", theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=f"Changes: {file_name}", border_style="green"))

    def show_issues(self, issues: List[ConversionIssue]):
        if not issues:
            return

        table = Table(title="Conversion Issues", show_lines=True, header_style="bold magenta")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Type", style="bold red")
        table.add_column("Message", style="white")

        for index, issue in enumerate(issues, 1):
            table.add_row(str(index), issue.type.value, issue.format())

        self.console.print(table)

    def print_final_table(self, reports: List[Dict[str, Any]]):
        table = Table(title="Slim2ERB Execution Report", show_lines=True, header_style="bold magenta")
        table.add_column("File Path", style="cyan")
        table.add_column("Output", style="white")
        table.add_column("Status", style="bold")
        table.add_column("Result", justify="center")

        for r in reports:
            success = r.get("success", False)
            status_color = "green" if success else "red"
            table.add_row(
                str(r.get("file_path")),
                str(r.get("output_path") or "-"),
                f"[{status_color}]{r.get('status', 'FAILED')}[/{status_color}]",
                "✅" if success else "❌",
            )

        self.console.print(table)

    def print_summary(self, summary: Dict[str, Any], dry_run: bool = False):
        issues = ", ".join(f"{k}: {v}" for k, v in summary.get("issues_by_type", {}).items()) or "none"
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total Files:      {summary['total_files']}\n"
            f"Converted:        [green]{summary['successful']}[/green]\n"
            f"Failed:           [red]{summary['failed']}[/red]\n"
            f"Written:          {summary['written_to_disk']}\n"
            f"Backups Created:  {summary['backups_created']}\n"
            f"Issues:           {issues}",
            border_style="dim",
        ))
        if dry_run:
            self.console.print("\n[bold cyan]Dry Run Mode:[/bold cyan] No files were modified.")

"""Rich-based console dashboard for workflow snapshots.

Renders the three stages the way the web front-end lays them out: the file
list with upload progress during intake, the grid of revealed jobs with
placeholders while streaming, and the chat transcript once conversing.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any

from rich.console import Console as RichConsole
from rich.progress_bar import ProgressBar
from rich.table import Table as RichTable

from resume_match.domain.enums import FileStatus, WorkflowStage
from resume_match.domain.values import (
    FileSnapshot,
    ResultRecord,
    RevealSnapshot,
    Turn,
    WorkflowSnapshot,
)

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_file_size(size: int) -> str:
    """Human-readable size: ``0 Bytes``, ``512 Bytes``, ``1.5 KB``, ``2 MB``."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    i = 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[i]}"


_STAGE_TITLES = {
    WorkflowStage.INTAKE: "Upload Your Resume",
    WorkflowStage.REVEALING: "Matching Job Opportunities",
    WorkflowStage.CONVERSING: "AI Assistant",
}


class WorkflowDashboard:
    """Console presentation of a :class:`WorkflowSnapshot`.

    Parameters
    ----------
    file:
        Output stream.  Defaults to ``sys.stdout``.
    width:
        Fixed console width; ``None`` lets rich detect it.
    """

    def __init__(self, file: Any = None, width: int | None = None) -> None:
        self._file = file or sys.stdout
        self._console = RichConsole(file=self._file, width=width)

    # -- public API --------------------------------------------------------

    def print_snapshot(self, snapshot: WorkflowSnapshot) -> None:
        """Print every section relevant to the snapshot's stage."""
        self._console.print()
        self._console.rule(f"[bold]{_STAGE_TITLES[snapshot.stage]}[/bold]")
        if snapshot.stage == WorkflowStage.INTAKE:
            self.print_files(snapshot.files)
            return
        self.print_reveal(snapshot.reveal)
        if snapshot.stage == WorkflowStage.CONVERSING:
            self.print_transcript(snapshot.transcript)

    def print_files(self, files: Sequence[FileSnapshot]) -> None:
        if not files:
            self._console.print("[dim]Drop your resume here or click to upload[/dim]")
            return

        table = RichTable(show_header=True, header_style="bold cyan")
        table.add_column("File", style="bold")
        table.add_column("Size", justify="right")
        table.add_column("Progress")
        table.add_column("Status")
        for f in files:
            if f.status == FileStatus.COMPLETED:
                status = "[green]Upload completed[/green]"
            elif f.status == FileStatus.FAILED:
                status = f"[red]Failed[/red] {f.failure_reason}".rstrip()
            else:
                status = f"Uploading... {f.progress}%"
            table.add_row(
                f.name,
                format_file_size(f.size),
                ProgressBar(total=100, completed=f.progress, width=20),
                status,
            )
        self._console.print(table)

    def print_reveal(self, reveal: RevealSnapshot) -> None:
        self.print_records(reveal.records)
        if reveal.streaming:
            if reveal.pending_slots:
                self._console.print(f"[dim]{reveal.pending_slots} more pending[/dim]")
            self._console.print("Finding more matching jobs...")

    def print_records(self, records: Sequence[ResultRecord]) -> None:
        if not records:
            self._console.print("[dim]No matching jobs yet[/dim]")
            return

        table = RichTable(show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right")
        table.add_column("Title", style="bold")
        table.add_column("Company")
        table.add_column("Location")
        table.add_column("Salary", style="green")
        table.add_column("Type")
        for idx, r in enumerate(records, start=1):
            table.add_row(
                str(idx), r.title, r.company, r.location, r.salary, r.employment_type
            )
        self._console.print(table)

    def print_transcript(self, turns: Sequence[Turn]) -> None:
        if not turns:
            self._console.print("[dim]Ask me anything about these jobs...[/dim]")
            return
        for turn in turns:
            who = "[bold]You[/bold]" if turn.is_user else "[bold magenta]Assistant[/bold magenta]"
            self._console.print(f"{who}: {turn.content}")

"""Terminal progress for a migration run, drawn with Rich."""

from __future__ import annotations

from types import TracebackType

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from planstore.migration.progress import MigrationProgress

_PHASE_STYLES = {"Upload": "green", "Reconcile": "blue"}


def _describe(phase: str) -> str:
    style = _PHASE_STYLES.get(phase, "white")
    return f"[{style}]{phase}[/]"


class RichMigrationProgress(MigrationProgress):
    """One bar per migration phase; failures are counted beside the bar.

    Enter the object before the run starts::

        with RichMigrationProgress() as progress:
            result = await coordinator.migrate_all(progress=progress)
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("{task.fields[note]}"),
            TimeElapsedColumn(),
            console=self._console,
        )
        self._phases: dict[str, RichTaskID] = {}
        self._failed: dict[str, int] = {}

    def __enter__(self) -> RichMigrationProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def phase_start(self, phase: str, total: int) -> None:
        self._phases[phase] = self._progress.add_task(_describe(phase), total=total or None, note="")

    def item_done(self, phase: str, *, failed: bool = False) -> None:
        if phase not in self._phases:
            return
        if failed:
            self._failed[phase] = self._failed.get(phase, 0) + 1
            self._progress.update(self._phases[phase], note=f"[yellow]{self._failed[phase]} failed[/]")
        self._progress.advance(self._phases[phase])

    def phase_done(self, phase: str) -> None:
        if phase not in self._phases:
            return
        task_id = self._phases[phase]
        done = self._progress.tasks[task_id].completed
        self._progress.update(task_id, total=max(done, 1), completed=max(done, 1))

    def phase_error(self, phase: str, error: BaseException) -> None:
        if phase not in self._phases:
            return
        task_id = self._phases[phase]
        self._progress.update(task_id, note="[red]stopped[/]")
        self._progress.stop_task(task_id)
        self._console.print(f"[red]{phase} stopped:[/] {error}")

"""titan CLI — inspect and control detached workers.

`titan ps`, `titan kill`, `titan prune` etc. all operate on the registry
file (``~/.titan`` unless --registry or TITAN_REGISTRY_PATH says otherwise).
"""

from __future__ import annotations

import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from titan.config import settings
from titan.exceptions import TitanError, WorkerNotFoundError
from titan.processes.registry import WorkerRegistry, get_registry
from titan.processes.worker import Worker

console = Console()

app = typer.Typer(
    name="titan",
    help="titan -- detached background workers that outlive your program.",
    no_args_is_help=True,
)

_state: dict[str, Path | None] = {"registry": None}


def _registry() -> WorkerRegistry:
    return get_registry(_state["registry"])


def _fail(e: Exception) -> None:
    console.print(f"[red]Error: {escape(str(e))}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    registry: Optional[Path] = typer.Option(
        None, "--registry", "-r", help="Registry file (default: ~/.titan)"
    ),
):
    """Manage titan workers."""
    logging.basicConfig(level=settings.log_level)
    _state["registry"] = registry


@app.command("ps")
def ps():
    """List registered workers and whether they are alive."""
    try:
        workers = _registry().all()
    except TitanError as e:
        _fail(e)

    if not workers:
        console.print("[dim]No workers registered.[/dim]")
        return

    table = Table(title="Workers")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("PID", justify="right", style="yellow")
    table.add_column("Created", style="dim")
    table.add_column("State")

    for w in workers.values():
        state = "[bold green]alive[/bold green]" if w.is_alive() else "[dim]dead[/dim]"
        table.add_row(str(w.id), str(w.pid), _fmt_time(w.created_at), state)

    console.print(table)


@app.command("kill")
def kill(
    worker_id: str = typer.Argument(help="Worker ID to signal"),
    sig: str = typer.Option(
        settings.default_signal, "--signal", "-s", help="KILL, TERM, QUIT, INT, ..."
    ),
):
    """Send a signal to a worker."""
    registry = _registry()
    try:
        registry.kill(_resolve_id(registry, worker_id), sig)
    except (TitanError, ProcessLookupError, ValueError) as e:
        _fail(e)
    console.print(f"[green]Sent {sig.upper()} to worker {worker_id}[/green]")


@app.command("prune")
def prune():
    """Forget workers whose process has exited."""
    registry = _registry()
    try:
        before = registry.all()
        after = registry.prune()
    except TitanError as e:
        _fail(e)

    removed = [wid for wid in before if wid not in after]
    if not removed:
        console.print("[dim]Nothing to prune.[/dim]")
        return
    for wid in removed:
        console.print(f"[yellow]Pruned {wid}[/yellow]")
    console.print(f"{len(after)} worker(s) remaining")


@app.command("rename")
def rename(
    worker_id: str = typer.Argument(help="Current worker ID"),
    new_id: str = typer.Argument(help="New worker ID"),
):
    """Give a worker a new ID."""
    registry = _registry()
    try:
        worker = registry.find(_resolve_id(registry, worker_id))
        if worker is None:
            raise WorkerNotFoundError(f"Worker {worker_id!r} not found")
        worker.set_id(new_id)
    except TitanError as e:
        _fail(e)
    console.print(f"[green]Renamed {worker_id} to {new_id}[/green]")


@app.command("forget")
def forget(worker_id: str = typer.Argument(help="Worker ID to remove")):
    """Remove a worker from the registry without signaling it."""
    registry = _registry()
    try:
        worker = registry.remove(_resolve_id(registry, worker_id))
    except TitanError as e:
        _fail(e)
    if worker is None:
        console.print(f"[dim]No worker {worker_id}[/dim]")
        return
    console.print(f"[green]Forgot worker {worker_id} (pid {worker.pid})[/green]")


@app.command("spawn")
def spawn(
    command: list[str] = typer.Argument(help="Command to run in the background"),
    worker_id: Optional[str] = typer.Option(None, "--id", help="Worker ID"),
):
    """Run a command as a detached worker."""
    try:
        worker = Worker.create(
            lambda: subprocess.call(list(command)),
            id=worker_id,
            registry=_registry(),
        )
    except TitanError as e:
        _fail(e)
    console.print(f"[green]Started worker {worker.id} (pid {worker.pid})[/green]")


def _resolve_id(registry: WorkerRegistry, raw: str) -> str | int:
    """Command-line IDs are strings; fall back to an integer ID if one matches."""
    workers = registry.all()
    if raw not in workers and raw.isdigit() and int(raw) in workers:
        return int(raw)
    return raw


def _fmt_time(ts: datetime) -> str:
    return ts.astimezone().strftime("%Y-%m-%d %H:%M:%S")

"""Worker Registry — the on-disk table of detached workers.

Every titan process that touches workers shares one YAML file (``~/.titan``
by default). The registry keeps an in-memory copy of it and follows a
simple protocol:

- every read (add, find, all, remove, kill) reloads the file first, so
  workers spawned by other processes become visible
- every mutation rewrites the whole file

There is no locking. Two processes doing load → mutate → save at the same
time race on the file and the last writer wins. Callers that need strict
consistency must serialize access themselves.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from titan.config import settings
from titan.exceptions import RegistryCorruptError, WorkerNotFoundError
from titan.processes.worker import Worker
from titan.types import WorkerId

_logger = logging.getLogger(__name__)


class WorkerRegistry:
    """File-backed mapping from worker ID to Worker."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path or settings.registry_path).expanduser()
        self._workers: dict[WorkerId, Worker] = {}

    @property
    def path(self) -> Path:
        return self._path

    # ── Persistence ───────────────────────────────────────────────────────────

    def load(self) -> None:
        """Replace the in-memory mapping with the file contents.

        A missing file leaves the mapping untouched. An empty file empties
        it. Anything unreadable raises RegistryCorruptError.
        """
        if not self._path.exists():
            return

        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise RegistryCorruptError(f"Cannot parse {self._path}: {e}") from e

        if not data:
            self._workers = {}
            return
        if not isinstance(data, dict):
            raise RegistryCorruptError(
                f"Expected a mapping in {self._path}, got {type(data).__name__}"
            )

        workers: dict[WorkerId, Worker] = {}
        for key, record in data.items():
            try:
                worker = Worker.model_validate(record)
            except ValidationError as e:
                raise RegistryCorruptError(
                    f"Bad worker record {key!r} in {self._path}: {e}"
                ) from e
            worker._registry = self
            workers[worker.id] = worker

        self._workers = workers
        _logger.debug("Loaded %d workers from %s", len(workers), self._path)

    def save(self) -> None:
        """Overwrite the file with the full in-memory mapping."""
        data = {wid: w.model_dump(mode="json") for wid, w in self._workers.items()}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            yaml.safe_dump(data, default_flow_style=False), encoding="utf-8"
        )
        _logger.debug("Saved %d workers to %s", len(data), self._path)

    # ── Operations ────────────────────────────────────────────────────────────

    def add(self, worker: Worker) -> Worker:
        self.load()
        worker._registry = self
        self._workers[worker.id] = worker
        self.save()
        return worker

    def find(self, worker_id: WorkerId) -> Worker | None:
        """Return the worker registered under ``worker_id``, if any."""
        self.load()
        return self._workers.get(worker_id)

    def kill(self, worker_id: WorkerId, name: Any = "KILL") -> None:
        """Signal the worker registered under ``worker_id``."""
        worker = self.find(worker_id)
        if worker is None:
            raise WorkerNotFoundError(f"Worker {worker_id!r} not found")
        worker.signal(name)

    def all(self) -> dict[WorkerId, Worker]:
        """Return every registered worker, freshly loaded from disk."""
        self.load()
        return dict(self._workers)

    def remove(self, worker_id: WorkerId) -> Worker | None:
        """Forget a worker without signaling it."""
        self.load()
        worker = self._workers.pop(worker_id, None)
        self.save()
        return worker

    def rekey(self, worker: Worker, new_id: WorkerId) -> None:
        """Move ``worker`` to ``new_id`` and persist."""
        old_id = worker.id
        self._workers.pop(old_id, None)
        worker.id = new_id
        worker._registry = self
        self._workers[new_id] = worker
        self.save()
        _logger.info("Renamed worker %s to %s", old_id, new_id)

    def prune(self) -> dict[WorkerId, Worker]:
        """Drop dead workers and persist.

        Works on the in-memory mapping as it is; call ``all()`` first to
        prune what is on disk.
        """
        dead = [wid for wid, w in self._workers.items() if not w.is_alive()]
        for wid in dead:
            del self._workers[wid]
        self.save()
        if dead:
            _logger.info("Pruned %d dead workers: %s", len(dead), dead)
        return dict(self._workers)


_registries: dict[Path, WorkerRegistry] = {}


def get_registry(path: Path | str | None = None) -> WorkerRegistry:
    """Process-wide registry for ``path`` (default: settings.registry_path)."""
    key = Path(path or settings.registry_path).expanduser()
    if key not in _registries:
        _registries[key] = WorkerRegistry(key)
    return _registries[key]

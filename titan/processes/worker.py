"""Worker — one detached background process and its identifier."""

from __future__ import annotations

import logging
import signal as _signal
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, Field, PrivateAttr

from titan.processes import spawn
from titan.types import WorkerId, new_id

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Worker(BaseModel):
    """A forked OS process tracked by a WorkerRegistry.

    The PID is fixed for the life of the worker; the ID can be changed
    with ``set_id``, which re-keys the registry entry.
    """

    id: WorkerId
    pid: int = Field(frozen=True, gt=0)
    created_at: datetime = Field(default_factory=_utcnow)

    # Registry this worker was added to or loaded from
    _registry: Any = PrivateAttr(default=None)

    @classmethod
    def create(
        cls,
        work: Callable[[], Any],
        id: WorkerId | None = None,
        registry: Any = None,
    ) -> Worker:
        """Fork a child running ``work`` and register it.

        Without an explicit ``id`` a fresh one is generated. ``registry``
        defaults to the process-wide registry for the configured path.
        """
        from titan.processes.registry import get_registry

        pid = spawn.spawn_detached(work)
        worker = cls(id=new_id() if id is None else id, pid=pid)
        _logger.info("Spawned worker %s as pid %d", worker.id, pid)
        (registry or get_registry()).add(worker)
        return worker

    def signal(self, name: str | int | _signal.Signals = "KILL") -> None:
        """Send a signal, e.g. 'KILL', 'TERM', 'QUIT', 'INT'.

        Raises ProcessLookupError when the process no longer exists.
        """
        spawn.send_signal(self.pid, name)

    def is_alive(self) -> bool:
        return spawn.pid_alive(self.pid)

    def set_id(self, new_id: WorkerId) -> None:
        """Rename this worker and persist the registry under the new key."""
        from titan.processes.registry import get_registry

        registry = self._registry or get_registry()
        registry.rekey(self, new_id)

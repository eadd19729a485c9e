"""OS integration — fork detached children, signal them, probe liveness.

The only place in titan that talks to the process table directly. Worker
and WorkerRegistry go through these functions, which keeps them easy to
patch in tests.
"""

from __future__ import annotations

import logging
import os
import signal
import threading
import traceback
from typing import Any, Callable

_logger = logging.getLogger(__name__)


def spawn_detached(work: Callable[[], Any]) -> int:
    """Fork a child that runs ``work`` and return its PID.

    The child ignores SIGHUP before running ``work`` and leaves through
    ``os._exit`` right after, so no atexit hooks or finalizers of the
    parent run twice. The parent never blocks on the child: a daemon
    thread reaps it once it exits.
    """
    pid = os.fork()
    if pid == 0:
        status = 0
        try:
            signal.signal(signal.SIGHUP, signal.SIG_IGN)
            work()
        except BaseException:
            traceback.print_exc()
            status = 1
        finally:
            os._exit(status)

    _reap_in_background(pid)
    _logger.debug("Forked detached child %d", pid)
    return pid


def _reap_in_background(pid: int) -> threading.Thread:
    """Wait for ``pid`` on a daemon thread so it never lingers as a zombie."""

    def _wait() -> None:
        try:
            os.waitpid(pid, 0)
        except ChildProcessError:
            pass  # already reaped elsewhere

    reaper = threading.Thread(target=_wait, name=f"titan-reaper-{pid}", daemon=True)
    reaper.start()
    return reaper


def resolve_signal(name: str | int | signal.Signals) -> signal.Signals:
    """Turn 'KILL', 'SIGKILL', 9 or signal.SIGKILL into a signal.Signals."""
    if isinstance(name, signal.Signals):
        return name
    if isinstance(name, int):
        return signal.Signals(name)
    key = name.strip().upper()
    if not key.startswith("SIG"):
        key = "SIG" + key
    try:
        return signal.Signals[key]
    except KeyError:
        raise ValueError(f"Unknown signal: {name!r}") from None


def send_signal(pid: int, name: str | int | signal.Signals = "KILL") -> None:
    """Deliver a signal. Raises ProcessLookupError if ``pid`` is gone."""
    if pid <= 0:
        raise ProcessLookupError(f"Refusing to signal process group {pid}")
    sig = resolve_signal(name)
    os.kill(pid, sig)
    _logger.debug("Sent %s to %d", sig.name, pid)


def pid_alive(pid: int) -> bool:
    """Best-effort liveness probe on the process group of ``pid``."""
    if pid <= 0:
        return False  # 0 and negatives name groups, not one process
    try:
        os.getpgid(pid)
    except ProcessLookupError:
        return False
    except OSError:
        return False
    return True

from __future__ import annotations

import logging
import socket
import threading
from typing import Callable
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

Listener = Callable[[bool], None]


class ConnectivityGate:
    """Last known reachability of the network, updated by push."""

    def __init__(self, reachable: bool = True) -> None:
        self._reachable = reachable
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

    @property
    def is_reachable(self) -> bool:
        with self._lock:
            return self._reachable

    def update(self, reachable: bool) -> None:
        with self._lock:
            changed = reachable != self._reachable
            self._reachable = reachable
            listeners = list(self._listeners)
        if changed:
            logger.info("Connectivity changed: reachable=%s", reachable)
            for listener in listeners:
                listener(reachable)

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)


def tcp_probe(base_url: str, timeout: float = 3.0) -> Callable[[], bool]:
    parsed = urlparse(base_url)
    host = parsed.hostname or base_url
    port = parsed.port or (443 if parsed.scheme != "http" else 80)

    def probe() -> bool:
        try:
            with socket.create_connection((host, port), timeout=timeout):
                return True
        except OSError:
            return False

    return probe


class ConnectivityMonitor:
    """Runs a probe on a daemon thread and pushes the outcome into a gate."""

    def __init__(self, gate: ConnectivityGate, probe: Callable[[], bool], interval: float = 10.0) -> None:
        self.gate = gate
        self.probe = probe
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def check_now(self) -> bool:
        reachable = bool(self.probe())
        self.gate.update(reachable)
        return reachable

    def _run(self) -> None:
        while not self._stop.is_set():
            self.check_now()
            self._stop.wait(self.interval)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="connectivity-monitor", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval)
            self._thread = None

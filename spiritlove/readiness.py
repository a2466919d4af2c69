"""Startup readiness gate.

One gate per application instance, kept on ``app.state.readiness``. Requests
that need the database wait behind it until initialization has run.
"""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ReadinessGate:
    """Runs an initializer once and reports whether the service may take traffic."""

    def __init__(self, ready: bool = False) -> None:
        self._lock = threading.Lock()
        self._ready = ready
        self.error: Exception | None = None

    @property
    def is_ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        self._ready = True

    def run(self, initializer: Callable[[], None]) -> None:
        """Run the initializer unless the gate is already open.

        A failing initializer is logged and recorded on ``error``; the gate still
        opens, since tables may already exist from an earlier run.
        """
        with self._lock:
            if self._ready:
                return
            try:
                logger.info("Running database initialization...")
                initializer()
                logger.info("Database initialization complete")
            except Exception as e:
                logger.exception("Database initialization failed")
                self.error = e
            self._ready = True

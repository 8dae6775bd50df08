"""
Run log: the human-readable progress lines of the current export run.
"""

import logging
from typing import Callable

from done_export.observability.logger import get_logger

logger = get_logger(__name__)

LogListener = Callable[[str], None]


class RunLog:
    """
    Ordered, append-only list of status lines for one run.

    Reset at the start of every run. Lines are mirrored to the application
    logger and handed to an optional listener (the CLI prints them).
    Listener failures are logged and do not interrupt the run.
    """

    def __init__(self, listener: LogListener | None = None):
        self._lines: list[str] = []
        self.listener = listener

    def reset(self) -> None:
        self._lines = []

    def append(self, message: str, level: int = logging.INFO) -> None:
        self._lines.append(message)
        logger.log(level, message, extra={"run_log_line": len(self._lines)})
        if self.listener is None:
            return
        try:
            self.listener(message)
        except Exception:
            # A failing listener (e.g. closed stdout) must not abort the run
            logger.warning("Run log listener failed", extra={"run_log_line": len(self._lines)}, exc_info=True)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(list(self._lines))

"""
Timer Service - Cancelable one-shot timers.

Used for the bot-pairing delay, the game duration countdown, the bot greeting
and simulated typing latency. Every timer can be canceled once superseded.
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class TimerHandle:
    """Handle for a scheduled callback."""

    def __init__(self, timer: threading.Timer, name: str):
        self._timer = timer
        self.name = name

    def cancel(self) -> None:
        """Cancel the timer. No-op if it already fired."""
        self._timer.cancel()

    @property
    def active(self) -> bool:
        return not self._timer.finished.is_set()


class TimerService:
    """Schedules callbacks on daemon timer threads."""

    def __init__(self):
        logger.info("TimerService initialized")

    def schedule(self, delay_ms: float, callback: Callable, *args, name: str = 'timer') -> TimerHandle:
        """
        Run a callback once after a delay.

        Args:
            delay_ms: Delay in milliseconds
            callback: Callable to run on the timer thread
            *args: Positional arguments for the callback
            name: Label used in logs

        Returns:
            A cancelable TimerHandle
        """
        def run():
            try:
                callback(*args)
            except Exception as e:
                logger.exception(f"Error in timer callback {name}: {e}")

        timer = threading.Timer(max(delay_ms, 0) / 1000.0, run)
        timer.daemon = True
        timer.start()
        logger.debug(f"Scheduled {name} in {delay_ms}ms")
        return TimerHandle(timer, name)

"""
Tracking of in-flight document loads.

Opening a document happens off the UI thread. When the user picks another
file before the previous one finished loading, the old load must not
deliver its result. Each load gets a PendingLoad handle; only the newest,
uncancelled handle is accepted, and only once.
"""
import itertools
import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class PendingLoad:
    """Single-shot handle for one document load."""

    def __init__(self, generation: int, source: Optional[str] = None):
        self.generation = generation
        self.source = source
        self._cancelled = threading.Event()
        self.settled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def __repr__(self):
        state = "cancelled" if self.cancelled else ("settled" if self.settled else "pending")
        return f"<PendingLoad #{self.generation} {self.source!r} {state}>"


class DocumentLoadTracker:
    """Hands out load handles and decides which result may be used."""

    def __init__(self):
        self._counter = itertools.count(1)
        self.current: Optional[PendingLoad] = None

    def begin(self, source: Optional[str] = None) -> PendingLoad:
        """
        Start a new load, cancelling the one in flight.

        Args:
            source: Description of what is being loaded (usually a path)

        Returns:
            Handle for the new load
        """
        if self.current is not None and not self.current.settled:
            logger.debug("Superseding %r", self.current)
            self.current.cancel()
        self.current = PendingLoad(next(self._counter), source)
        return self.current

    def accept(self, load: PendingLoad) -> bool:
        """
        Settle a finished load.

        Returns:
            True if the result of this load should be used. False for
            superseded, cancelled or already settled loads.
        """
        if load is not self.current or load.cancelled or load.settled:
            logger.debug("Discarding result of %r", load)
            return False
        load.settled = True
        return True

    def cancel(self) -> None:
        """Cancel the load in flight, if any."""
        if self.current is not None and not self.current.settled:
            self.current.cancel()

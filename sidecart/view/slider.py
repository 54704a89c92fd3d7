"""
Auto-advancing rotation for the suggestion strip.

Each slider instance owns its index and its timer task; nothing is shared
between widgets.
"""
import asyncio
from typing import Callable, Optional

from sidecart.logging import get_logger

logger = get_logger(__name__)

SLIDE_INTERVAL = 5.0


class SuggestionSlider:
    """
    Args:
        total: Number of slides
        interval: Seconds between automatic advances
        on_change: Called with the new index whenever the slide changes
    """

    def __init__(
        self,
        total: int,
        interval: float = SLIDE_INTERVAL,
        on_change: Optional[Callable[[int], None]] = None,
    ):
        self.total = total
        self.interval = interval
        self.on_change = on_change
        self.index = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def go_to(self, index: int) -> None:
        """Jump to a slide and restart the autoplay timer."""
        if not 0 <= index < self.total:
            raise IndexError(f"slide {index} out of range 0..{self.total - 1}")
        self._show(index)
        if self.is_running:
            self.stop()
            self.start()

    def next(self) -> int:
        """Advance one slide, wrapping to the first."""
        if self.total:
            self._show((self.index + 1) % self.total)
        return self.index

    def _show(self, index: int) -> None:
        self.index = index
        if self.on_change is not None:
            self.on_change(index)

    def start(self) -> None:
        """Start autoplay. A single slide never rotates."""
        if self.total <= 1 or self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Slider initialized with {self.total} slides")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.next()

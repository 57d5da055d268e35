"""
Merged event stream for the interactive loop.

Two producers feed one asyncio queue: a tick task that emits a `tick` event
every `tick_rate` seconds, and a daemon thread that blocks on terminal input
and emits one `input` event per chunk read. Events are consumed in arrival
order; neither producer has priority.
"""

import asyncio
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import click
from loguru import logger

TICK = "tick"
INPUT = "input"

KeyReader = Callable[[], str]


@dataclass
class Event:
    """One event on the merged stream."""
    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.utcnow)


def read_key() -> str:
    """Block until the terminal delivers a key; Ctrl-C and Ctrl-D come back as text."""
    try:
        return click.getchar()
    except KeyboardInterrupt:
        return "\x03"
    except EOFError:
        return "\x04"


class EventStream:
    """
    Async queue fed by a tick task and an input-reader thread.

    The reader thread cannot be interrupted while blocked on the terminal; it
    is a daemon thread and stops on its own after the next key once the
    stream is stopped.
    """

    def __init__(
        self,
        tick_rate: float = 0.25,
        key_reader: Optional[KeyReader] = read_key,
    ):
        self.tick_rate = tick_rate
        self._key_reader = key_reader
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._running = False
        self._tick_task: Optional[asyncio.Task] = None
        self._input_thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()
        self._stats = defaultdict(int)

    async def start(self) -> None:
        """Start both producers."""
        if self._running:
            logger.warning("Event stream already running")
            return

        self._running = True
        self._stopped.clear()
        self._loop = asyncio.get_running_loop()
        self._tick_task = asyncio.create_task(self._produce_ticks())

        if self._key_reader is not None:
            self._input_thread = threading.Thread(
                target=self._produce_input, name="bibfind-input", daemon=True
            )
            self._input_thread.start()
        logger.debug(f"Event stream started (tick every {self.tick_rate:.3f}s)")

    async def stop(self) -> None:
        """
        Stop the tick task and tell the input thread to exit.

        The input thread is not joined: it may be blocked in the terminal
        read, so one more key press after the display closes is consumed by
        it and discarded. It is a daemon thread and never keeps the process
        alive.
        """
        self._running = False
        self._stopped.set()
        if self._tick_task:
            self._tick_task.cancel()
            try:
                await self._tick_task
            except asyncio.CancelledError:
                pass
            self._tick_task = None
        logger.debug("Event stream stopped")

    def emit_nowait(self, event: Event) -> None:
        """Queue an event from the event loop thread."""
        self._queue.put_nowait(event)
        self._stats[event.type] += 1

    def emit_threadsafe(self, event: Event) -> bool:
        """
        Queue an event from another thread.
        Returns False once the stream is stopped or its loop has closed.
        """
        loop = self._loop
        if loop is None or not self._running or loop.is_closed():
            self._stats["dropped"] += 1
            return False
        try:
            loop.call_soon_threadsafe(self.emit_nowait, event)
        except RuntimeError:
            # Loop closed between the check and the call
            self._stats["dropped"] += 1
            return False
        return True

    async def next(self) -> Event:
        """Wait for the next event from either producer."""
        event = await self._queue.get()
        self._stats["processed"] += 1
        return event

    async def _produce_ticks(self) -> None:
        while self._running:
            self.emit_nowait(Event(type=TICK))
            await asyncio.sleep(self.tick_rate)

    def _produce_input(self) -> None:
        while not self._stopped.is_set():
            try:
                raw = self._key_reader()
            except Exception as e:
                logger.error(f"Input reader failed: {e}")
                self.emit_threadsafe(Event(type=INPUT, data={"key": "\x04"}))
                return
            if self._stopped.is_set():
                return
            if not self.emit_threadsafe(Event(type=INPUT, data={"key": raw})):
                return

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)

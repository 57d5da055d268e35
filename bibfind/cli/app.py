"""Interactive full-screen picker driving a SearchSession."""

from typing import Optional, Sequence

from loguru import logger
from rich.console import Console
from rich.live import Live

from ..core.models import Direction
from ..core.session import SearchSession
from .events import INPUT, TICK, Event, EventStream, KeyReader, read_key
from .keys import Action, decode
from .render import render_frame


class InteractiveApp:
    """
    Adapter between the terminal and a SearchSession.

    Owns everything the search core does not: which query box has focus,
    key bindings, the event stream and the rich Live display.
    """

    def __init__(
        self,
        session: SearchSession,
        labels: Sequence[str],
        tick_rate: float = 0.25,
        console: Optional[Console] = None,
        key_reader: Optional[KeyReader] = read_key,
    ):
        if len(labels) != session.coordinator.category_count:
            raise ValueError("one label per search category is required")
        self.session = session
        self.labels = list(labels)
        self.tick_rate = tick_rate
        self.console = console or Console()
        self.key_reader = key_reader
        self.focused_box = 0
        self.outcome: Optional[Action] = None

    @property
    def box_count(self) -> int:
        return len(self.labels)

    def handle_action(self, action: Action, text: str = "") -> bool:
        """Apply one decoded action; return True when the loop should end."""
        session = self.session
        if action is Action.INSERT:
            session.add_text(self.focused_box, text)
        elif action is Action.BACKSPACE:
            session.remove_letter(self.focused_box)
        elif action is Action.DELETE_WORD:
            session.remove_word(self.focused_box)
        elif action is Action.CLEAR_ALL:
            session.clear_all()
        elif action is Action.NEXT_BOX:
            self.focused_box = (self.focused_box + 1) % self.box_count
        elif action is Action.PREVIOUS_BOX:
            self.focused_box = (self.focused_box - 1) % self.box_count
        elif action is Action.NEXT_RESULT:
            session.navigate(Direction.NEXT)
        elif action is Action.PREVIOUS_RESULT:
            session.navigate(Direction.PREVIOUS)
        elif action in (Action.COMMIT, Action.CANCEL):
            self.outcome = action
            return True
        return False

    def handle_event(self, event: Event) -> bool:
        if event.type == TICK:
            self.session.tick()
            return False
        if event.type == INPUT:
            for action, text in decode(event.data.get("key", "")):
                if self.handle_action(action, text):
                    return True
        return False

    def frame(self):
        return render_frame(
            self.session.view(),
            self.labels,
            self.focused_box,
            self.console.size.height,
        )

    async def run(self) -> Optional[int]:
        """
        Run until the user commits or cancels.
        Returns the committed record id, or None.
        """
        stream = EventStream(tick_rate=self.tick_rate, key_reader=self.key_reader)
        await stream.start()
        try:
            with Live(
                self.frame(),
                console=self.console,
                screen=True,
                auto_refresh=False,
                transient=True,
            ) as live:
                while True:
                    event = await stream.next()
                    if self.handle_event(event):
                        break
                    self.session.poll()
                    live.update(self.frame(), refresh=True)
        finally:
            await stream.stop()

        logger.debug(f"Interactive session ended: {self.outcome}, stats {stream.get_stats()}")
        if self.outcome is Action.COMMIT:
            return self.session.commit()
        return None

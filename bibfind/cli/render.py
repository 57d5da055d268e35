"""Rich rendering of a search session frame."""

from typing import Sequence

from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from ..core.models import CoordinatorState
from ..core.session import SessionView

HIGHLIGHT_SYMBOL = ">> "


def visible_window(selected: int, total: int, height: int) -> range:
    """Indices of the list rows to draw so the selection stays on screen."""
    height = max(height, 1)
    if total <= height:
        return range(total)
    start = min(max(selected - height // 2, 0), total - height)
    return range(start, start + height)


def render_results(view: SessionView, height: int) -> Panel:
    ranked = view.ranked
    selected = view.selected if view.selected is not None else 0
    lines = []
    for i in visible_window(selected, len(ranked), height):
        entry = ranked[i]
        if i == view.selected:
            lines.append(Text(HIGHLIGHT_SYMBOL + entry.record.title, style="bold cyan"))
        else:
            lines.append(Text(" " * len(HIGHLIGHT_SYMBOL) + entry.record.title))

    status = f"{len(ranked)} matches"
    if view.state is not CoordinatorState.IDLE:
        status += " (searching)"
    if not lines:
        lines.append(Text("No matches", style="yellow"))
    return Panel(Group(*lines), title="Results", subtitle=status, subtitle_align="right")


def render_selected(view: SessionView) -> Panel:
    entry = view.selected_entry
    if entry is None:
        return Panel(Text(""), title="Selected item:")
    body = Text()
    for text in entry.record.categories:
        body.append(f"{text}\n")
    body.append(f"\nscore {entry.score:.3f}", style="dim")
    return Panel(body, title="Selected item:")


def render_query_box(label: str, text: str, focused: bool) -> Panel:
    if focused:
        return Panel(Text(text), title=f"***{label}***", border_style="green")
    return Panel(Text(text), title=label)


def render_frame(
    view: SessionView,
    labels: Sequence[str],
    focused_box: int,
    height: int,
) -> Layout:
    """Build the full-screen layout: results | selection, query boxes below."""
    layout = Layout()
    layout.split_column(
        Layout(name="main", ratio=4),
        Layout(name="queries", ratio=1, minimum_size=3),
    )
    layout["main"].split_row(
        Layout(name="results"),
        Layout(name="selected"),
    )
    layout["queries"].split_row(*(
        Layout(render_query_box(label, text, i == focused_box), name=f"query-{i}")
        for i, (label, text) in enumerate(zip(labels, view.queries))
    ))

    # Borders take two rows out of the list area
    list_height = max(height * 4 // 5 - 2, 1)
    layout["results"].update(render_results(view, list_height))
    layout["selected"].update(render_selected(view))
    return layout

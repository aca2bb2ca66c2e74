"""Custom Textual widgets for the browser."""

from rich.console import RenderableType
from rich.text import Text
from textual.reactive import reactive
from textual.widgets import Static

from .models import FaultCode, SiteStatus, Tab
from .rendering import render_page

STATUS_LABELS = {
    SiteStatus.NORMAL: ("NORMAL", "green"),
    SiteStatus.SLOWED: ("THROTTLED", "yellow"),
    SiteStatus.BLOCKED: ("BLOCKED", "red"),
    SiteStatus.CONTENT_REMOVED: ("CONTENT REMOVED", "blue"),
    SiteStatus.UNDER_APPEAL: ("IN COURT", "magenta"),
}

FAULT_MESSAGES = {
    FaultCode.CONNECTION_RESET: "The connection was reset.",
    FaultCode.GENERATION_FAILED: "This site can't be reached.",
}


class TabStripWidget(Static):
    """Row of open tabs."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.tabs: list[Tab] = []
        self.active_id: str | None = None

    def show(self, tabs: list[Tab], active_id: str) -> None:
        self.tabs = list(tabs)
        self.active_id = active_id
        self.refresh()

    def render(self) -> RenderableType:
        text = Text()
        for tab in self.tabs:
            label = tab.title if len(tab.title) <= 24 else tab.title[:21] + "..."
            if tab.loading:
                label = f"⟳ {label}"
            if tab.id == self.active_id:
                text.append(f" {label} ", style="bold reverse")
            else:
                text.append(f" {label} ", style="dim")
            text.append("│", style="dim")
        return text


class PageWidget(Static):
    """Body of the active tab: loading notice, error page or rendered content."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.tab: Tab | None = None

    def show(self, tab: Tab) -> None:
        self.tab = tab
        self.refresh(layout=True)

    def render(self) -> RenderableType:
        tab = self.tab
        if tab is None or tab.is_home:
            return Text("")

        if tab.loading:
            text = Text(f"Loading {tab.current_url} ...", style="cyan")
            if tab.status is SiteStatus.SLOWED:
                text.append("\nThe connection is unusually slow.", style="dim yellow")
            return text

        if tab.error:
            text = Text()
            text.append("✗ ", style="red bold")
            text.append(FAULT_MESSAGES[tab.error], style="bold")
            text.append(f"\n\n{tab.current_url}\n", style="dim")
            text.append(tab.error.value, style="dim red")
            return text

        return Text(render_page(tab.content or "").text)


class RegulatorPanel(Static):
    """Current target, its status and the actions available."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.tab: Tab | None = None

    def show(self, tab: Tab) -> None:
        self.tab = tab
        self.refresh(layout=True)

    def render(self) -> RenderableType:
        text = Text()
        text.append("▸ REGULATOR CONSOLE\n\n", style="magenta bold")

        tab = self.tab
        if tab is None or tab.is_home:
            text.append("No active target", style="dim")
            return text

        text.append("Target: ", style="dim")
        text.append(f"{tab.current_url}\n", style="cyan underline")
        label, color = STATUS_LABELS[tab.status]
        text.append("Status: ", style="dim")
        text.append(f"{label}\n\n", style=f"{color} bold")

        if tab.status is SiteStatus.UNDER_APPEAL:
            actions = [("F7", "Go to court"), ("F4", "Lift restrictions")]
        else:
            actions = [
                ("F2", "Throttle"),
                ("F3", "Block"),
                ("F4", "Lift restrictions"),
                ("F6", "Contact owner"),
            ]
        for key, name in actions:
            text.append(f"  [{key}] ", style="dim cyan")
            text.append(f"{name}\n")

        if tab.transcript:
            text.append(f"\n{len(tab.transcript)} messages exchanged", style="dim")
        return text


class NotificationWidget(Static):
    """Widget for showing temporary notifications."""

    message = reactive("")
    style_name = reactive("green")

    def render(self) -> RenderableType:
        if self.message:
            return Text(self.message, style=self.style_name)
        return Text("")

    def show(self, msg: str, duration: float = 3.0, style: str = "green") -> None:
        """Show a notification that auto-hides."""
        self.message = msg
        self.style_name = style
        self.set_timer(duration, self._clear)

    def _clear(self) -> None:
        self.message = ""

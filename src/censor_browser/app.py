"""Main Textual application for the regulator browser."""

import logging

import pyperclip
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Footer, Header, Input, OptionList, Static
from textual.widgets.option_list import Option

from .models import SiteStatus, Tab, Verdict
from .rendering import render_page
from .screens import ChatScreen, CourtScreen
from .session import BrowserSession
from .widgets import NotificationWidget, PageWidget, RegulatorPanel, TabStripWidget

logger = logging.getLogger(__name__)


class CensorBrowserApp(App):
    """Browser window plus the regulator console."""

    TITLE = "Censor Browser"

    CSS = """
    Screen {
        background: $surface;
    }

    #tab-strip {
        height: 1;
        background: $panel;
    }

    #address {
        margin: 0 1;
    }

    #viewport {
        width: 1fr;
        padding: 0 1;
        border: solid $primary;
    }

    #home-label {
        color: $accent;
        text-style: bold;
        padding: 1 0;
    }

    #results, #links {
        height: auto;
        max-height: 12;
        margin-top: 1;
    }

    #panel {
        width: 36;
        padding: 1;
        border: solid $error;
    }

    #notification {
        dock: bottom;
        height: 1;
        padding: 0 1;
    }

    ChatScreen, CourtScreen {
        align: center middle;
    }

    #chat-window, #court-window {
        width: 80%;
        height: 80%;
        padding: 1 2;
        border: thick $accent;
        background: $surface;
    }

    #chat-log {
        height: 1fr;
    }

    #chat-typing {
        height: 1;
    }

    #court-body {
        height: 1fr;
        padding: 1 0;
    }

    #court-actions {
        height: auto;
        align: center middle;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+t", "new_tab", "New tab", priority=True),
        Binding("ctrl+w", "close_tab", "Close tab", priority=True),
        Binding("f8", "cycle_tab(-1)", "Prev tab", show=False),
        Binding("f9", "cycle_tab(1)", "Next tab", show=False),
        Binding("alt+left", "back", "Back", priority=True),
        Binding("alt+right", "forward", "Forward", priority=True),
        Binding("f5", "reload", "Reload"),
        Binding("ctrl+l", "focus_address", "Address", priority=True),
        Binding("f2", "throttle", "Throttle"),
        Binding("f3", "block", "Block"),
        Binding("f4", "restore", "Restore"),
        Binding("f6", "contact_owner", "Contact"),
        Binding("f7", "open_court", "Court"),
        Binding("ctrl+y", "copy_url", "Copy URL", show=False, priority=True),
    ]

    def __init__(self, session: BrowserSession, **kwargs):
        super().__init__(**kwargs)
        self.session = session
        self._rendered_for: tuple[str, str | None] | None = None
        self._links = []

    def compose(self) -> ComposeResult:
        yield Header()
        yield TabStripWidget(id="tab-strip")
        yield Input(placeholder="Search or enter address", id="address")
        with Horizontal():
            with VerticalScroll(id="viewport"):
                yield Static(id="home-label")
                yield OptionList(id="results")
                yield PageWidget(id="page")
                yield OptionList(id="links")
            yield RegulatorPanel(id="panel")
        yield NotificationWidget(id="notification")
        yield Footer()

    def on_mount(self) -> None:
        # Modal screens sit on top of this one; queries must not follow them.
        self._main = self.screen
        self.session.navigator.subscribe(self._on_tab_changed)
        self.refresh_view()
        self._main.query_one("#address", Input).focus()

    @property
    def tab(self) -> Tab:
        return self.session.active_tab

    def _on_tab_changed(self, tab: Tab) -> None:
        if isinstance(self.screen, ChatScreen) and self.screen.tab is tab:
            self.screen.update_transcript()
        if tab is self.tab:
            self.refresh_view()
        else:
            self._main.query_one("#tab-strip", TabStripWidget).show(
                self.session.tabs, self.session.active_tab_id
            )

    def refresh_view(self) -> None:
        """Redraw everything for the active tab."""
        tab = self.tab
        self.sub_title = "" if tab.is_home else tab.current_url
        self._main.query_one("#tab-strip", TabStripWidget).show(self.session.tabs, self.session.active_tab_id)

        address = self._main.query_one("#address", Input)
        if not address.has_focus:
            address.value = "" if tab.is_home else tab.current_url

        self._main.query_one("#page", PageWidget).show(tab)
        self._main.query_one("#panel", RegulatorPanel).show(tab)
        self._render_home(tab)
        self._render_links(tab)

    def _render_home(self, tab: Tab) -> None:
        label = self._main.query_one("#home-label", Static)
        results = self._main.query_one("#results", OptionList)
        label.display = tab.is_home
        results.display = tab.is_home and bool(self.session.search_results)
        if not tab.is_home:
            return

        if self.session.searching:
            label.update(Text("Searching...", style="dim italic"))
        else:
            label.update(Text("⌕ Type a query or an address above", style="bold"))
        results.clear_options()
        for i, result in enumerate(self.session.search_results):
            prompt = Text()
            prompt.append(f"{result.title}\n", style="bold cyan")
            prompt.append(f"{result.url}\n", style="green")
            prompt.append(result.snippet, style="dim")
            results.add_option(Option(prompt, id=str(i)))

    def _render_links(self, tab: Tab) -> None:
        links = self._main.query_one("#links", OptionList)
        visible = not tab.is_home and not tab.loading and tab.error is None and bool(tab.content)
        links.display = visible
        key = (tab.id, tab.content if visible else None)
        if key == self._rendered_for:
            return
        self._rendered_for = key

        links.clear_options()
        self._links = render_page(tab.content).links if visible else []
        for i, link in enumerate(self._links):
            links.add_option(Option(f"→ {link.text}", id=str(i)))

    def notify_user(self, msg: str, style: str = "green") -> None:
        self._main.query_one("#notification", NotificationWidget).show(msg, style=style)

    # Address bar, links and search results

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "address":
            return
        value = event.value
        self._main.query_one("#viewport", VerticalScroll).focus()
        self.run_worker(self.session.submit_address(value), group="navigation")

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        index = event.option_index
        if event.option_list.id == "results":
            if index < len(self.session.search_results):
                url = self.session.search_results[index].url
                self.run_worker(self.session.navigate(url), group="navigation")
        elif event.option_list.id == "links":
            if index < len(self._links):
                self.run_worker(self._follow(self._links[index].href), group="navigation")

    async def _follow(self, href: str) -> None:
        if not await self.session.follow_link(href):
            self.notify_user("That link goes nowhere.", style="dim")

    @property
    def console_ready(self) -> bool:
        """True when no chat or court window is covering the browser."""
        return self.screen is self._main

    # Tabs and history

    def action_new_tab(self) -> None:
        if not self.console_ready:
            return
        self.session.new_tab()
        self.refresh_view()
        self.action_focus_address()

    def action_close_tab(self) -> None:
        if not self.console_ready:
            return
        if not self.session.close_tab(self.session.active_tab_id):
            self.notify_user("Can't close the last tab.", style="yellow")
        self.refresh_view()

    def action_cycle_tab(self, offset: int) -> None:
        if not self.console_ready:
            return
        self.session.cycle_tab(offset)
        self.refresh_view()

    def action_back(self) -> None:
        if self.console_ready:
            self.run_worker(self.session.navigator.back(self.tab), group="navigation")

    def action_forward(self) -> None:
        if self.console_ready:
            self.run_worker(self.session.navigator.forward(self.tab), group="navigation")

    def action_reload(self) -> None:
        if self.console_ready:
            self.run_worker(self.session.navigator.reload(self.tab), group="navigation")

    def action_focus_address(self) -> None:
        if self.console_ready:
            self._main.query_one("#address", Input).focus()

    def action_copy_url(self) -> None:
        if isinstance(self.screen, CourtScreen):
            ruling = self.screen.ruling_text()
            if ruling is not None:
                self._copy(ruling, "Copied the ruling to clipboard")
            return
        if self.tab.is_home:
            return
        self._copy(self.tab.current_url, f"Copied {self.tab.current_url} to clipboard")

    def _copy(self, text: str, done: str) -> None:
        try:
            pyperclip.copy(text)
            self.notify_user(done)
        except pyperclip.PyperclipException as e:
            logger.warning(f"Clipboard unavailable: {e}")
            self.notify_user("Clipboard unavailable.", style="red")

    # Regulator actions

    def action_throttle(self) -> None:
        if self.console_ready:
            self.run_worker(self.session.enforcement.throttle(self.tab), group="enforcement")

    def action_restore(self) -> None:
        if self.console_ready:
            self.run_worker(self.session.enforcement.restore(self.tab), group="enforcement")

    def action_block(self) -> None:
        if self.console_ready:
            self.run_worker(self._block(self.tab), group="enforcement")

    async def _block(self, tab: Tab) -> None:
        status = await self.session.enforcement.block(tab)
        if status is SiteStatus.UNDER_APPEAL:
            self.notify_user(
                "The site owner filed an emergency appeal with the Supreme Digital Court!",
                style="magenta bold",
            )

    def action_contact_owner(self) -> None:
        tab = self.tab
        if not self.console_ready or not self.session.negotiator.can_negotiate(tab):
            return
        self.push_screen(ChatScreen(tab))

    def send_chat_message(self, tab: Tab, url: str, text: str) -> None:
        self.run_worker(self.session.negotiator.send_message(tab, text, url=url), group="negotiation")

    def action_open_court(self) -> None:
        tab = self.tab
        if not self.console_ready or tab.is_home or tab.status is not SiteStatus.UNDER_APPEAL:
            return
        self.push_screen(CourtScreen(tab), callback=self._on_court_closed)

    def start_hearing(self, screen: CourtScreen) -> None:
        """Called by the court screen once it is mounted."""
        self.run_worker(self._hear_case(screen), group="court")

    async def _hear_case(self, screen: CourtScreen) -> None:
        verdict = await self.session.enforcement.open_appeal(screen.tab)
        if verdict is None:
            screen.dismiss(None)
        elif screen.is_attached:
            screen.show_verdict(verdict)

    def _on_court_closed(self, verdict: Verdict | None) -> None:
        if verdict is None:
            return
        self.run_worker(self.session.court.close_court(verdict), group="court")

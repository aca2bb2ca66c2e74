"""Modal screens for negotiation and court."""

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

from .models import CourtVerdict, Speaker, Tab, Verdict
from .urls import hostname


class ChatScreen(ModalScreen[None]):
    """Messenger window with the site owner."""

    BINDINGS = [Binding("escape", "close", "Close")]

    def __init__(self, tab: Tab, **kwargs):
        super().__init__(**kwargs)
        self.tab = tab
        self.url = tab.current_url

    def compose(self) -> ComposeResult:
        with Vertical(id="chat-window"):
            yield Static(
                Text(f"✉ Owner of {hostname(self.url)}", style="bold cyan"),
                id="chat-title",
            )
            with VerticalScroll(id="chat-log"):
                yield Static(id="chat-transcript")
            yield Static(id="chat-typing")
            yield Input(placeholder="Write to the owner...", id="chat-input")

    def on_mount(self) -> None:
        self.update_transcript()
        self.query_one("#chat-input", Input).focus()

    def update_transcript(self) -> None:
        text = Text()
        for entry in self.tab.transcript:
            if entry.speaker is Speaker.REGULATOR:
                text.append("You: ", style="bold magenta")
            else:
                text.append("Owner: ", style="bold green")
            text.append(f"{entry.text}\n")
        if not self.tab.transcript:
            text.append("Demand the removal of illegal content.", style="dim")
        self.query_one("#chat-transcript", Static).update(text)
        self.query_one("#chat-log", VerticalScroll).scroll_end(animate=False)

        typing = Text("owner is typing...", style="dim italic") if self.tab.reply_pending else Text("")
        self.query_one("#chat-typing", Static).update(typing)
        self.query_one("#chat-input", Input).disabled = self.tab.reply_pending

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        value = event.value.strip()
        if not value or self.tab.reply_pending:
            return
        event.input.value = ""
        self.app.send_chat_message(self.tab, self.url, value)

    def action_close(self) -> None:
        self.dismiss(None)


class CourtScreen(ModalScreen[Verdict]):
    """Court hearing: waits for a verdict, then lets the user accept it."""

    def __init__(self, tab: Tab, **kwargs):
        super().__init__(**kwargs)
        self.tab = tab
        self.site_title = tab.title
        self.verdict: CourtVerdict | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="court-window"):
            yield Static(
                Text(f"⚖ SUPREME DIGITAL COURT\nAppeal: {self.site_title}", style="bold yellow"),
                id="court-title",
            )
            yield Static(Text("The court is in session...", style="dim italic"), id="court-body")
            with Horizontal(id="court-actions"):
                yield Button("Accept the ruling", id="court-accept", variant="primary", disabled=True)

    def on_mount(self) -> None:
        self.app.start_hearing(self)

    def show_verdict(self, verdict: CourtVerdict) -> None:
        self.verdict = verdict
        text = Text()
        if verdict.verdict is Verdict.UPHOLD:
            text.append("APPEAL DENIED - THE BLOCK STANDS\n\n", style="bold red")
        else:
            text.append("APPEAL GRANTED - THE BLOCK IS LIFTED\n\n", style="bold green")
        text.append(f"{verdict.reasoning}\n\n")
        text.append(f"Judge: {verdict.judge_name}\n", style="dim")
        text.append("Ctrl+Y copies the ruling", style="dim italic")
        self.query_one("#court-body", Static).update(text)
        button = self.query_one("#court-accept", Button)
        button.disabled = False
        button.focus()

    def ruling_text(self) -> str | None:
        if self.verdict is None:
            return None
        return (
            f"{self.site_title}: {self.verdict.verdict.value}\n"
            f"{self.verdict.reasoning}\n"
            f"Judge: {self.verdict.judge_name}"
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "court-accept" and self.verdict is not None:
            self.dismiss(self.verdict.verdict)

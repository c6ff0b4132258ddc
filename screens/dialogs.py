# screens/dialogs.py
from __future__ import annotations
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static

DIALOG_CSS = """
{name} {
    align: center middle;
}
{name} #dialog {
    width: 70;
    height: auto;
    max-height: 80%;
    border: thick $primary;
    background: $surface;
    padding: 1 2;
}
{name} #dialog_title {
    text-style: bold;
    color: $accent;
    margin-bottom: 1;
}
{name} #dialog_buttons {
    height: 3;
    align: center middle;
    margin-top: 1;
}
"""


class InfoDialog(ModalScreen[None]):
    """Non-blocking notice with a single Ok button."""

    DEFAULT_CSS = DIALOG_CSS.replace("{name}", "InfoDialog")

    def __init__(self, text: str, title: str = "Information") -> None:
        super().__init__()
        self.text = text
        self.dialog_title = title

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(self.dialog_title, id="dialog_title", markup=False)
            yield Static(self.text, id="dialog_text", markup=False)
            with Horizontal(id="dialog_buttons"):
                yield Button("Ok", id="btn_ok", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#btn_ok", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_ok":
            self.dismiss(None)


class YesNoDialog(ModalScreen[bool]):
    """Question dismissed with True for Yes and False for No."""

    DEFAULT_CSS = DIALOG_CSS.replace("{name}", "YesNoDialog")

    def __init__(self, title: str, text: str) -> None:
        super().__init__()
        self.dialog_title = title
        self.text = text

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(self.dialog_title, id="dialog_title", markup=False)
            yield Static(self.text, id="dialog_text", markup=False)
            with Horizontal(id="dialog_buttons"):
                yield Button("No", id="btn_no", variant="default")
                yield Button("Yes", id="btn_yes", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#btn_yes", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_yes":
            self.dismiss(True)
        elif event.button.id == "btn_no":
            self.dismiss(False)


class FinalDialog(ModalScreen[None]):
    """Terminal message; its only button ends the installer."""

    DEFAULT_CSS = DIALOG_CSS.replace("{name}", "FinalDialog")

    def __init__(self, text: str, title: str, button: str = "Ok") -> None:
        super().__init__()
        self.text = text
        self.dialog_title = title
        self.button_label = button

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(self.dialog_title, id="dialog_title", markup=False)
            yield Static(self.text, id="dialog_text", markup=False)
            with Horizontal(id="dialog_buttons"):
                yield Button(self.button_label, id="btn_quit", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#btn_quit", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_quit":
            self.app.quit_installer()

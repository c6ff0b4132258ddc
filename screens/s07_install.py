# screens/s07_install.py
from __future__ import annotations
from typing import Optional
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, ProgressBar, Static
from flow import Step
from screens.dialogs import FinalDialog, InfoDialog, YesNoDialog
from screens.step import StepScreen
from session.engine import (
    Error, ExitedEarly, Finished, Info, InstallSession, Progress, Prompt, SpawnFailed, UiEvent,
)
from logger import log

REFRESH_INTERVAL = 0.1


class InstallScreen(StepScreen):
    """Step 7: Runs the low-level installer and shows what it reports."""

    STEP = Step.INSTALL

    def __init__(self) -> None:
        super().__init__()
        self.session: Optional[InstallSession] = None

    def compose(self) -> ComposeResult:
        yield from self.compose_header()
        with Vertical(id="content"):
            yield ProgressBar(total=100, show_eta=False, id="install_bar")
            yield Static("starting the installation ..", id="status_msg", markup=False)
        with Horizontal(id="nav_buttons"):
            yield Button("Abort", id="btn_abort", variant="error")
        yield Footer()

    def on_mount(self) -> None:
        self.session = self.app.start_session()
        # Worker output shows up even while the user does nothing
        self.set_interval(REFRESH_INTERVAL, self.dispatch_events)

    def action_go_back(self) -> None:
        pass

    def dispatch_events(self) -> None:
        if self.session is None:
            return
        for event in self.session.poll_events():
            self.handle_event(event)

    def handle_event(self, event: UiEvent) -> None:
        bar = self.query_one("#install_bar", ProgressBar)
        status = self.query_one("#status_msg", Static)

        if isinstance(event, Progress):
            bar.update(progress=event.percent)
            status.update(event.text)
        elif isinstance(event, Info):
            self.app.push_screen(InfoDialog(event.text, title="Information"))
        elif isinstance(event, Error):
            self.app.push_screen(InfoDialog(event.text, title="Error"))
        elif isinstance(event, Prompt):
            session = self.session
            self.app.push_screen(
                YesNoDialog("Prompt", event.text),
                lambda yes: session.reply(bool(yes)),
            )
        elif isinstance(event, Finished):
            bar.update(progress=100)
            status.update(event.text)
            log.info("Installation finished: success=%s", event.success)
            # Rebooting means quitting; the caller of the installer reboots
            self.app.push_screen(FinalDialog(
                event.text, title="Success" if event.success else "Failure",
                button="Reboot now",
            ))
            if event.success and self.app.options.autoreboot:
                self.app.schedule_reboot()
        elif isinstance(event, SpawnFailed):
            self.app.push_screen(FinalDialog(event.text, title="Error", button="Ok"))
        elif isinstance(event, ExitedEarly):
            self.app.push_screen(FinalDialog(event.text, title="Error", button="Exit"))

# screens/s01_license.py
from __future__ import annotations
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Footer, Static
from environment import read_eula
from flow import Step
from screens.step import StepScreen
from logger import log


class LicenseScreen(StepScreen):
    """Step 1: End user license agreement."""

    STEP = Step.LICENSE

    def compose(self) -> ComposeResult:
        yield from self.compose_header()
        yield Static("END USER LICENSE AGREEMENT (EULA)", classes="title")
        with VerticalScroll(id="eula_box"):
            yield Static(read_eula(self.app.context.setup_info), id="eula", markup=False)
        with Horizontal(id="nav_buttons"):
            yield Button("Abort", id="btn_abort", variant="error")
            yield Button("I agree", id="btn_next", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#btn_next", Button).focus()

    def action_next_step(self) -> None:
        log.info("Step 1: license accepted")
        super().action_next_step()

# screens/step.py
from __future__ import annotations
from typing import Any, ClassVar
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import Button, Footer, Select
from flow import Step
from widgets.installer_header import InstallerHeader


class StepScreen(Screen):
    """Common frame of every wizard step: header, Abort / Previous / Next."""

    STEP: ClassVar[Step]

    BINDINGS = [
        ("escape", "go_back", "Previous"),
    ]

    def compose_header(self) -> ComposeResult:
        yield InstallerHeader(self.app.context.title, self.STEP.title)

    def compose_nav(self, next_label: str = "Next →", previous: bool = True) -> ComposeResult:
        with Horizontal(id="nav_buttons"):
            yield Button("Abort", id="btn_abort", variant="error")
            if previous:
                yield Button("← Previous", id="btn_back", variant="default")
            yield Button(next_label, id="btn_next", variant="primary")
        yield Footer()

    def collect_options(self) -> Any:
        """Validated options of this step; raises ValidationError otherwise."""
        return None

    def action_go_back(self) -> None:
        self.app.flow.retreat()

    def action_next_step(self) -> None:
        self.app.flow.advance(self.STEP, self.collect_options)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn_abort":
            self.app.action_abort_install()
        elif event.button.id == "btn_back":
            self.action_go_back()
        elif event.button.id == "btn_next":
            self.action_next_step()


def initial_value(value, options):
    """`value` if it is one of the Select `options`, else let Select pick the first."""
    if value in [v for _, v in options]:
        return value
    return Select.NULL

# screens/s06_summary.py
from __future__ import annotations
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Checkbox, DataTable
from flow import Step
from screens.step import StepScreen
from logger import log


class SummaryScreen(StepScreen):
    """Step 6: Everything collected so far; built fresh on every visit."""

    STEP = Step.SUMMARY

    def compose(self) -> ComposeResult:
        yield from self.compose_header()
        with Vertical(id="content"):
            yield DataTable(id="summary_table", cursor_type="none")
            yield Checkbox(
                "Automatically reboot after successful installation",
                value=True, id="chk_autoreboot",
            )
        yield from self.compose_nav(next_label="Install")

    def on_mount(self) -> None:
        table = self.query_one("#summary_table", DataTable)
        table.add_columns("Option", "Selected value")
        rows = self.app.options.to_summary(self.app.context.locales)
        for name, value in rows:
            table.add_row(name, value)
        log.info("Step 6: summary with %d rows", len(rows))

    def collect_options(self) -> bool:
        return self.query_one("#chk_autoreboot", Checkbox).value

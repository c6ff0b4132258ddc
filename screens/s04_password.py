# screens/s04_password.py
from __future__ import annotations
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Input, Label
from flow import Step
from screens.step import StepScreen
from state import PasswordOptions
from validators import ValidationError, validate_email, validate_password
from logger import log


class PasswordScreen(StepScreen):
    """Step 4: Root password and administrator email."""

    STEP = Step.PASSWORD

    def compose(self) -> ComposeResult:
        yield from self.compose_header()
        with VerticalScroll(id="form"):
            yield Label("Root password:")
            yield Input(password=True, id="inp_pw")
            yield Label("Confirm root password:")
            yield Input(password=True, id="inp_pw_confirm")
            yield Label("Administrator email:")
            yield Input(value=self.app.options.password.email, id="inp_email")
        yield from self.compose_nav()

    def collect_options(self) -> PasswordOptions:
        password = self.query_one("#inp_pw", Input).value
        confirm = self.query_one("#inp_pw_confirm", Input).value
        email = self.query_one("#inp_email", Input).value.strip()

        for ok, msg in (validate_password(password, confirm), validate_email(email)):
            if not ok:
                raise ValidationError(msg)

        log.info("Step 4: password set, email=%s", email)
        return PasswordOptions(root_password=password, email=email)

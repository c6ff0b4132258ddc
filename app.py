# app.py
from __future__ import annotations
from typing import Callable, Dict, List, Optional
from textual.app import App
from textual.binding import Binding
from textual.screen import Screen
from textual.timer import Timer
from environment import InstallerContext, late_setup_warnings
from flow import FlowController, ScreenLookup, Step, StepRegistry
from screens.dialogs import FinalDialog, InfoDialog, YesNoDialog
from session.codec import format_configuration
from session.engine import InstallSession
from state import InstallerOptions
from logger import log

SessionFactory = Callable[[List[str], str, Dict[str, str]], InstallSession]


def _default_session(command: List[str], payload: str, env: Dict[str, str]) -> InstallSession:
    return InstallSession(command, payload, env=env)


class InstallerApp(App):
    """Installation wizard."""

    CSS = """
    Screen {
        background: $surface;
    }
    .title {
        text-style: bold;
        color: $accent;
        margin: 1 2 0 2;
    }
    #content {
        margin: 1 2;
        height: auto;
    }
    #form {
        margin: 1 2;
    }
    #eula_box {
        margin: 1 2;
        border: solid $primary;
    }
    #nav_buttons {
        dock: bottom;
        height: 3;
        align: center middle;
        margin: 1 2;
    }
    Button {
        margin: 0 1;
    }
    Input, Select {
        margin-bottom: 1;
    }
    DataTable {
        height: auto;
        max-height: 16;
        margin-bottom: 1;
    }
    ProgressBar {
        margin: 1 0;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "abort_install", "Abort", show=False, priority=True),
        Binding("ctrl+q", "abort_install", "Abort", show=False, priority=True),
    ]

    def __init__(
        self,
        context: InstallerContext,
        session_factory: SessionFactory = _default_session,
    ) -> None:
        super().__init__()
        self.context = context
        self.options = InstallerOptions.defaults(context)
        self.flow = FlowController(
            StepRegistry(), self.options, self, late_setup=self.run_late_setup,
        )
        self.session: Optional[InstallSession] = None
        self._session_factory = session_factory
        self._reboot_timer: Optional[Timer] = None
        self._quitting = False
        self.title = context.title
        log.info("InstallerApp started (test mode: %s)", context.config.in_test_mode)

    def on_mount(self) -> None:
        self.flow.start()

    # -- Screens ----------------------------------------------------------------

    def build_screen(self, step: Step) -> Screen:
        from screens.s01_license import LicenseScreen
        from screens.s02_bootdisk import BootdiskScreen
        from screens.s03_timezone import TimezoneScreen
        from screens.s04_password import PasswordScreen
        from screens.s05_network import NetworkScreen
        from screens.s06_summary import SummaryScreen
        from screens.s07_install import InstallScreen

        screens = {
            Step.LICENSE: LicenseScreen,
            Step.BOOTDISK: BootdiskScreen,
            Step.TIMEZONE: TimezoneScreen,
            Step.PASSWORD: PasswordScreen,
            Step.NETWORK: NetworkScreen,
            Step.SUMMARY: SummaryScreen,
            Step.INSTALL: InstallScreen,
        }
        return screens[step]()

    def present(self, step: Step, lookup: ScreenLookup) -> None:
        name = step.name.lower()
        if lookup.stale is not None:
            self.uninstall_screen(lookup.stale)
            lookup.stale.remove()
        if not self.is_screen_installed(lookup.handle):
            self.install_screen(lookup.handle, name)

        # The default screen stays at the bottom; steps replace each other above it
        if len(self.screen_stack) <= 1:
            self.push_screen(name)
        else:
            self.switch_screen(name)

    def show_error(self, message: str) -> None:
        self.push_screen(InfoDialog(message, title="Error"))

    def run_late_setup(self) -> None:
        for warning in late_setup_warnings(self.context, self.options.timezone.kb_layout):
            self.push_screen(InfoDialog(warning, title="Warning"))

    # -- Installation session ---------------------------------------------------

    def start_session(self) -> InstallSession:
        if self.session is not None:
            raise RuntimeError("an installation session is already running")
        config = self.context.config
        self.session = self._session_factory(
            config.worker_command, format_configuration(self.options), config.worker_env,
        )
        self.session.start()
        return self.session

    def schedule_reboot(self) -> None:
        delay = self.context.config.reboot_delay
        log.info("Automatic reboot in %.1fs", delay)
        self._reboot_timer = self.set_timer(delay, self._reboot_now, name="autoreboot")

    def _reboot_now(self) -> None:
        if self._quitting:
            return
        log.info("Automatic reboot: quitting installer")
        self.quit_installer()

    def quit_installer(self) -> None:
        if self._reboot_timer is not None:
            self._reboot_timer.stop()
            self._reboot_timer = None
        self._quitting = True
        self.exit()

    # -- Abort ------------------------------------------------------------------

    def action_abort_install(self) -> None:
        if not self.context.config.confirm_abort:
            self.abort_install()
            return
        self.push_screen(
            YesNoDialog("Abort installation?", "Are you sure you want to abort the installation?"),
            lambda yes: self.abort_install() if yes else None,
        )

    def abort_install(self) -> None:
        log.info("Installation aborted by user")
        if self.session is not None:
            self.session.abort()
        self.quit_installer()


class SetupErrorApp(App):
    """Shown instead of the wizard when the setup descriptors are unusable."""

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def on_mount(self) -> None:
        self.push_screen(FinalDialog(self.message, title="Installer setup error", button="Ok"))

    def quit_installer(self) -> None:
        self.exit(return_code=1)

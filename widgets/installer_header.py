# widgets/installer_header.py
from __future__ import annotations
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

LOGO = r"""
 ____
|  _ \ _ __ _____  ___ __ ___   _____  __
| |_) | '__/ _ \ \/ / '_ ` _ \ / _ \ \/ /
|  __/| | | (_) >  <| | | | | | (_) >  <
|_|   |_|  \___/_/\_\_| |_| |_|\___/_/\_\ """


class InstallerHeader(Vertical):
    """Logo plus '<product> Installer - <step>' line shown on every step."""

    DEFAULT_CSS = """
    InstallerHeader {
        height: auto;
        width: 100%;
        padding: 0 2;
    }
    InstallerHeader #logo {
        color: #e57000;
        text-style: bold;
        width: 100%;
        content-align: center top;
    }
    InstallerHeader #step_title {
        color: $accent;
        text-style: bold;
        width: 100%;
        content-align: center top;
    }
    """

    def __init__(self, title: str, step_title: str) -> None:
        super().__init__()
        self._title = title
        self._step_title = step_title

    def compose(self) -> ComposeResult:
        yield Static(LOGO.lstrip("\n"), id="logo", markup=False)
        yield Static(f"{self._title} - {self._step_title}", id="step_title", markup=False)

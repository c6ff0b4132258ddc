# screens/s02_bootdisk.py
from __future__ import annotations
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Input, Label, Select
from flow import Step
from screens.step import StepScreen, initial_value
from state import FILESYSTEMS, BootdiskOptions
from validators import ValidationError, parse_hdsize
from logger import log


class BootdiskScreen(StepScreen):
    """Step 2: Target disk, filesystem and usable size."""

    STEP = Step.BOOTDISK

    def compose(self) -> ComposeResult:
        disks = self.app.context.runtime_info.disks
        options = self.app.options.bootdisk

        yield from self.compose_header()
        with VerticalScroll(id="form"):
            yield Label("Target harddisk:")
            disk_options = [(str(d), d.path) for d in disks]
            yield Select(
                disk_options, value=initial_value(options.target_disk, disk_options),
                allow_blank=False, id="sel_disk",
            )
            yield Label("Filesystem:")
            fs_options = [(fs, fs) for fs in FILESYSTEMS]
            yield Select(
                fs_options, value=initial_value(options.filesystem, fs_options),
                allow_blank=False, id="sel_fs",
            )
            yield Label("Size to use (GiB):")
            yield Input(value=f"{options.hdsize:.2f}", id="inp_hdsize")
        yield from self.compose_nav()

    def on_select_changed(self, event: Select.Changed) -> None:
        # A new disk means a new maximum; offer the whole disk again
        if event.select.id == "sel_disk":
            disk = self._disk(event.value)
            if disk is not None:
                self.query_one("#inp_hdsize", Input).value = f"{disk.size_gib:.2f}"

    def _disk(self, path):
        for d in self.app.context.runtime_info.disks:
            if d.path == path:
                return d
        return None

    def collect_options(self) -> BootdiskOptions:
        disk = self._disk(self.query_one("#sel_disk", Select).value)
        if disk is None:
            raise ValidationError("no target harddisk selected")

        fs = self.query_one("#sel_fs", Select).value
        if fs not in FILESYSTEMS:
            raise ValidationError("no filesystem selected")

        raw_size = self.query_one("#inp_hdsize", Input).value.strip()
        try:
            hdsize = parse_hdsize(raw_size, round(disk.size_gib, 2))
        except ValueError as e:
            raise ValidationError(f"invalid disk size: {e}") from None

        log.info("Step 2: disk=%s fs=%s hdsize=%.2f", disk.path, fs, hdsize)
        return BootdiskOptions(target_disk=disk.path, filesystem=fs, hdsize=hdsize)

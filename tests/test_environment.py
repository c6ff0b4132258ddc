# tests/test_environment.py
"""Tests for environment.py and the option defaults derived from it."""
import json
import shutil
import subprocess
from dataclasses import replace
from unittest.mock import patch

import pytest

from config import TEST
from conftest import ROOT, make_context
from environment import (
    EULA_PLACEHOLDER, SetupError, late_setup_warnings, load_context, read_eula,
)
from flow import Step
from state import InstallerOptions, PasswordOptions


@pytest.fixture
def data_copy(tmp_path):
    """Writable copy of the bundled descriptors."""
    shutil.copytree(ROOT / "testdir", tmp_path / "testdir")
    return tmp_path / "testdir"


def rewrite(path, change):
    data = json.loads(path.read_text())
    change(data)
    path.write_text(json.dumps(data))


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

def test_load_context(context):
    assert context.title == "Proxmox VE (8.0-2) Installer"
    assert [d.path for d in context.runtime_info.disks] == ["/dev/sda", "/dev/sdb"]
    assert context.runtime_info.disks[0].size_gib == 32.0
    assert context.locales.countries["de"].zone == "Europe/Berlin"
    assert context.locales.kmap["en-us"].name == "U.S. English"
    assert list(context.runtime_info.network.interfaces) == ["eno1", "eno2"]

def test_missing_descriptor(data_copy):
    (data_copy / "run/proxmox-installer/locales.json").unlink()
    with pytest.raises(SetupError, match="locale info"):
        load_context(replace(TEST, base_path=str(data_copy)))

def test_malformed_descriptor(data_copy):
    (data_copy / "run/proxmox-installer/iso-info.json").write_text("{not json")
    with pytest.raises(SetupError, match="setup info"):
        load_context(replace(TEST, base_path=str(data_copy)))

def test_descriptor_missing_key(data_copy):
    rewrite(data_copy / "run/proxmox-installer/run-env-info.json",
            lambda d: d.pop("total_memory"))
    with pytest.raises(SetupError, match="runtime environment info"):
        load_context(replace(TEST, base_path=str(data_copy)))

def test_no_disks(data_copy):
    rewrite(data_copy / "run/proxmox-installer/run-env-info.json",
            lambda d: d.update(disks=[]))
    with pytest.raises(SetupError, match="hard disks"):
        load_context(replace(TEST, base_path=str(data_copy)))

def test_read_eula(context):
    setup_info = replace(context.setup_info, iso_path=ROOT / "testdir/cdrom")
    assert "test" in read_eula(setup_info).lower()

def test_read_eula_missing(context, tmp_path):
    setup_info = replace(context.setup_info, iso_path=tmp_path)
    assert read_eula(setup_info) == EULA_PLACEHOLDER


# ---------------------------------------------------------------------------
# Late setup
# ---------------------------------------------------------------------------

def test_no_warnings_on_capable_machine(context):
    assert late_setup_warnings(context, "de") == []

def test_low_memory_warning():
    context = make_context(total_memory=512)
    warnings = late_setup_warnings(context, "de")
    assert len(warnings) == 1
    assert "memory" in warnings[0]

def test_missing_virtualization_warning():
    context = make_context(hvm_supported=False)
    warnings = late_setup_warnings(context, "de")
    assert len(warnings) == 1
    assert "KVM" in warnings[0]

def test_keyboard_layout_not_touched_in_test_mode(context):
    with patch("system.set_keyboard_layout") as set_layout:
        late_setup_warnings(context, "de")
    set_layout.assert_not_called()

def test_keyboard_layout_applied_in_production():
    context = make_context(config=replace(TEST, in_test_mode=False))
    with patch("system.set_keyboard_layout") as set_layout:
        assert late_setup_warnings(context, "de-ch") == []
    assert set_layout.call_args.args[0].id == "de-ch"

def test_keyboard_layout_failure_is_a_warning():
    context = make_context(config=replace(TEST, in_test_mode=False))
    error = subprocess.CalledProcessError(1, ["loadkeys"])
    with patch("system.set_keyboard_layout", side_effect=error):
        warnings = late_setup_warnings(context, "de")
    assert len(warnings) == 1
    assert "keyboard layout" in warnings[0]


# ---------------------------------------------------------------------------
# Option defaults
# ---------------------------------------------------------------------------

def test_option_defaults(options):
    assert options.bootdisk.target_disk == "/dev/sda"
    assert options.bootdisk.filesystem == "ext4"
    assert options.bootdisk.hdsize == 32.0
    assert options.timezone.timezone == "Europe/Vienna"
    assert options.network.ifname == "eno1"
    assert options.network.fqdn == "pve.example.com"
    assert str(options.network.address) == "192.168.100.2/24"
    assert options.autoreboot is False

def test_unknown_country_falls_back():
    context = make_context(country="xx")
    options = InstallerOptions.defaults(context)
    assert options.timezone.country == "at"

def test_apply_rejects_install_step(options):
    with pytest.raises(ValueError):
        options.apply(Step.INSTALL, None)

def test_license_step_carries_nothing(options):
    before = replace(options.bootdisk)
    options.apply(Step.LICENSE, None)
    assert options.bootdisk == before

def test_summary_rows(context, options):
    options.apply(Step.PASSWORD, PasswordOptions(root_password="secret", email="root@example.com"))
    rows = dict(options.to_summary(context.locales))
    assert rows["Bootdisk"] == "/dev/sda"
    assert rows["Disk size"] == "32.00 GiB"
    assert rows["Country"] == "Austria"
    assert rows["Keyboard layout"] == "German"
    assert rows["Administrator email"] == "root@example.com"
    assert "secret" not in dict(options.to_summary(context.locales)).values()

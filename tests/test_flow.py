# tests/test_flow.py
"""Tests for flow.py: step order, screen caching and late setup."""
from dataclasses import replace

import pytest

from flow import Advanced, FlowController, Rejected, Step, StepRegistry
from state import BootdiskOptions, TimezoneOptions
from validators import ValidationError


class FakeScreen:
    def __init__(self, step, serial):
        self.step = step
        self.serial = serial


class FakePresenter:
    def __init__(self):
        self.built = []
        self.presented = []
        self.errors = []
        self.calls = []

    def build_screen(self, step):
        screen = FakeScreen(step, len(self.built))
        self.built.append(screen)
        return screen

    def present(self, step, lookup):
        self.presented.append((step, lookup))
        self.calls.append("present")

    def show_error(self, message):
        self.errors.append(message)


def make_flow(options, late_setup=None):
    presenter = FakePresenter()
    flow = FlowController(StepRegistry(), options, presenter, late_setup=late_setup)
    return flow, presenter


def reject(message):
    def collect():
        raise ValidationError(message)
    return collect


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------

def test_step_order():
    assert [s.name for s in Step] == [
        "LICENSE", "BOOTDISK", "TIMEZONE", "PASSWORD", "NETWORK", "SUMMARY", "INSTALL",
    ]
    assert Step.LICENSE.next() is Step.BOOTDISK
    assert Step.SUMMARY.next() is Step.INSTALL
    assert Step.BOOTDISK.previous() is Step.LICENSE
    assert Step.LICENSE.previous() is Step.LICENSE

def test_install_has_no_next():
    with pytest.raises(ValueError):
        Step.INSTALL.next()


# ---------------------------------------------------------------------------
# StepRegistry
# ---------------------------------------------------------------------------

def test_registry_caches_regular_steps():
    registry = StepRegistry()
    first = registry.lookup(Step.BOOTDISK, object)
    again = registry.lookup(Step.BOOTDISK, object)
    assert first.created and not again.created
    assert again.handle is first.handle
    assert again.stale is None

def test_registry_rebuilds_volatile_steps():
    registry = StepRegistry()
    first = registry.lookup(Step.SUMMARY, object)
    again = registry.lookup(Step.SUMMARY, object)
    assert again.created
    assert again.handle is not first.handle
    assert again.stale is first.handle
    assert registry.get(Step.SUMMARY) is again.handle
    assert len(registry) == 1


# ---------------------------------------------------------------------------
# FlowController
# ---------------------------------------------------------------------------

def test_start_shows_license_and_runs_late_setup_once(options):
    flow, presenter = make_flow(options, late_setup=lambda: presenter.calls.append("late"))
    flow.start()
    flow.advance(Step.LICENSE, lambda: None)
    flow.retreat()

    assert flow.current is Step.LICENSE
    assert presenter.calls.count("late") == 1
    assert presenter.calls.index("late") == 1, "late setup must follow the first present"

def test_advance_applies_and_moves_on(options):
    flow, presenter = make_flow(options)
    flow.start()
    flow.advance(Step.LICENSE, lambda: None)

    picked = BootdiskOptions(target_disk="/dev/sdb", filesystem="xfs", hdsize=20.0)
    result = flow.advance(Step.BOOTDISK, lambda: picked)

    assert result == Advanced(Step.TIMEZONE)
    assert flow.current is Step.TIMEZONE
    assert options.bootdisk == picked

def test_rejected_input_changes_nothing(options):
    flow, presenter = make_flow(options)
    flow.start()
    flow.advance(Step.LICENSE, lambda: None)
    before = options.bootdisk
    presented = len(presenter.presented)

    result = flow.advance(Step.BOOTDISK, reject("invalid disk size"))

    assert result == Rejected("invalid disk size")
    assert presenter.errors == ["Invalid values: invalid disk size"]
    assert flow.current is Step.BOOTDISK
    assert options.bootdisk == before
    assert len(presenter.presented) == presented

def test_retreat_on_first_step_is_noop(options):
    flow, presenter = make_flow(options)
    assert flow.retreat() is None
    flow.start()
    assert flow.retreat() is None
    assert len(presenter.presented) == 1

def test_back_shows_the_cached_screen(options):
    flow, presenter = make_flow(options)
    flow.start()
    flow.advance(Step.LICENSE, lambda: None)
    bootdisk = presenter.presented[-1][1].handle
    flow.advance(Step.BOOTDISK, lambda: options.bootdisk)

    assert flow.retreat() is Step.BOOTDISK
    step, lookup = presenter.presented[-1]
    assert step is Step.BOOTDISK
    assert not lookup.created
    assert lookup.handle is bootdisk

def test_summary_is_rebuilt_on_every_visit(options):
    flow, presenter = make_flow(options)
    flow.show(Step.NETWORK)
    flow.advance(Step.NETWORK, lambda: options.network)
    first = presenter.presented[-1][1].handle

    flow.retreat()
    flow.advance(Step.NETWORK, lambda: options.network)
    step, lookup = presenter.presented[-1]

    assert step is Step.SUMMARY
    assert lookup.created
    assert lookup.stale is first
    assert lookup.handle is not first

def test_options_aggregate_across_steps(options):
    defaults = replace(options)
    flow, _ = make_flow(options)
    flow.start()
    disk = BootdiskOptions(target_disk="/dev/sdb", filesystem="zfs (RAID0)", hdsize=50.0)
    zone = TimezoneOptions(country="de", timezone="Europe/Berlin", kb_layout="de")

    flow.advance(Step.LICENSE, lambda: None)
    flow.advance(Step.BOOTDISK, lambda: disk)
    flow.advance(Step.TIMEZONE, lambda: zone)

    assert options.bootdisk == disk
    assert options.timezone == zone
    assert flow.current is Step.PASSWORD
    assert options.password == defaults.password
    assert options.network == defaults.network
    assert options.autoreboot is False

def test_summary_sets_autoreboot(options):
    flow, presenter = make_flow(options)
    flow.show(Step.SUMMARY)
    assert flow.advance(Step.SUMMARY, lambda: True) == Advanced(Step.INSTALL)
    assert options.autoreboot is True
    assert presenter.presented[-1][0] is Step.INSTALL

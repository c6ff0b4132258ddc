# flow.py
"""Wizard step sequencing.

The :class:`FlowController` decides where the wizard goes next; it never looks
at individual form fields. Each screen validates its own input and hands the
controller a callable that returns the typed options or raises
:class:`~validators.ValidationError`. Screen objects are kept in a
:class:`StepRegistry` so that going back shows the exact form the user left,
except for volatile steps which are rebuilt on every visit.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, FrozenSet, Optional, Protocol, Union
from textual.screen import Screen
from validators import ValidationError
from logger import log

class Step(IntEnum):
    LICENSE = 0
    BOOTDISK = 1
    TIMEZONE = 2
    PASSWORD = 3
    NETWORK = 4
    SUMMARY = 5
    INSTALL = 6

    @property
    def title(self) -> str:
        return _TITLES[self]

    def next(self) -> "Step":
        if self is Step.INSTALL:
            raise ValueError("INSTALL is the last step")
        return Step(self + 1)

    def previous(self) -> "Step":
        return Step(max(self - 1, 0))


_TITLES = {
    Step.LICENSE: "License Agreement",
    Step.BOOTDISK: "Target Harddisk",
    Step.TIMEZONE: "Location and Time Zone",
    Step.PASSWORD: "Administration Password and Email",
    Step.NETWORK: "Management Network Configuration",
    Step.SUMMARY: "Summary",
    Step.INSTALL: "Installation",
}

VOLATILE_STEPS: FrozenSet[Step] = frozenset({Step.SUMMARY})


@dataclass(frozen=True)
class ScreenLookup:
    handle: Screen
    created: bool
    stale: Optional[Screen] = None


class StepRegistry:
    """Step -> screen handle, rebuilding volatile steps on every lookup."""

    def __init__(self, volatile: FrozenSet[Step] = VOLATILE_STEPS) -> None:
        self._handles: Dict[Step, Screen] = {}
        self.volatile = volatile

    def lookup(self, step: Step, build: Callable[[], Screen]) -> ScreenLookup:
        existing = self._handles.get(step)
        if existing is None:
            handle = build()
            self._handles[step] = handle
            return ScreenLookup(handle, created=True)
        if step in self.volatile:
            handle = build()
            self._handles[step] = handle
            return ScreenLookup(handle, created=True, stale=existing)
        return ScreenLookup(existing, created=False)

    def get(self, step: Step) -> Optional[Screen]:
        return self._handles.get(step)

    def is_empty(self) -> bool:
        return not self._handles

    def __contains__(self, step: object) -> bool:
        return step in self._handles

    def __len__(self) -> int:
        return len(self._handles)


class Presenter(Protocol):
    def build_screen(self, step: Step) -> Screen: ...

    def present(self, step: Step, lookup: ScreenLookup) -> None: ...

    def show_error(self, message: str) -> None: ...


@dataclass(frozen=True)
class Advanced:
    step: Step


@dataclass(frozen=True)
class Rejected:
    error: str


AdvanceResult = Union[Advanced, Rejected]


class FlowController:
    def __init__(
        self,
        registry: StepRegistry,
        options,
        presenter: Presenter,
        late_setup: Optional[Callable[[], None]] = None,
    ) -> None:
        self.registry = registry
        self.options = options
        self.presenter = presenter
        self._late_setup = late_setup
        self._late_setup_done = False
        self._current: Optional[Step] = None

    @property
    def current(self) -> Optional[Step]:
        return self._current

    def start(self) -> None:
        self.show(Step.LICENSE)

    def show(self, step: Step) -> None:
        first_screen = self.registry.is_empty()
        lookup = self.registry.lookup(step, lambda: self.presenter.build_screen(step))
        self.presenter.present(step, lookup)
        self._current = step
        log.info("Flow: showing %s (%s)", step.name, "new" if lookup.created else "cached")

        # Needs the first screen in place so advisories end up on top of it
        if first_screen and not self._late_setup_done:
            self._late_setup_done = True
            if self._late_setup is not None:
                self._late_setup()

    def advance(self, step: Step, collect: Callable[[], Any]) -> AdvanceResult:
        try:
            value = collect()
        except ValidationError as e:
            log.info("Flow: %s rejected: %s", step.name, e)
            self.presenter.show_error(f"Invalid values: {e}")
            return Rejected(str(e))

        self.options.apply(step, value)
        target = step.next()
        self.show(target)
        return Advanced(target)

    def retreat(self) -> Optional[Step]:
        if self._current is None or self._current is Step.LICENSE:
            return None
        target = self._current.previous()
        self.show(target)
        return target

# environment.py
"""Setup descriptors written by the low-level installer before the wizard starts.

Three JSON files are read once at startup from ``<base>/run/proxmox-installer``:
``iso-info.json`` (product and release), ``locales.json`` (countries, zones,
keymaps) and ``run-env-info.json`` (disks, memory, network). Together with the
configuration they form the read-only :class:`InstallerContext`.
"""
from __future__ import annotations
import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from config import InstallerConfig
from logger import log

MIN_MEMORY_MIB = 1024
EULA_PLACEHOLDER = "< Debug build - ignoring non-existing EULA >"


class SetupError(Exception):
    """The installer cannot start; shown once, then the process exits."""


@dataclass(frozen=True)
class SetupInfo:
    product: str
    fullname: str
    release: str
    isorelease: str
    iso_path: Path

    @classmethod
    def from_dict(cls, data: dict) -> "SetupInfo":
        return cls(
            product=data["config"]["product"],
            fullname=data["config"]["fullname"],
            release=str(data["iso-info"]["release"]),
            isorelease=str(data["iso-info"]["isorelease"]),
            iso_path=Path(data["locations"]["iso"]),
        )


@dataclass(frozen=True)
class CountryInfo:
    name: str
    zone: str
    kmap: str


@dataclass(frozen=True)
class KeyboardMapping:
    id: str
    name: str


@dataclass(frozen=True)
class LocaleInfo:
    cczones: Dict[str, List[str]]
    countries: Dict[str, CountryInfo]
    kmap: Dict[str, KeyboardMapping]

    @classmethod
    def from_dict(cls, data: dict) -> "LocaleInfo":
        return cls(
            cczones={cc: list(zones) for cc, zones in data["cczones"].items()},
            countries={
                cc: CountryInfo(name=c["name"], zone=c["zone"], kmap=c["kmap"])
                for cc, c in data["country"].items()
            },
            kmap={
                kid: KeyboardMapping(id=kid, name=k["name"])
                for kid, k in data["kmap"].items()
            },
        )


@dataclass(frozen=True, order=True)
class Disk:
    index: int
    path: str
    model: str
    size: int  # bytes

    @property
    def size_gib(self) -> float:
        return self.size / 1024 ** 3

    def __str__(self) -> str:
        return f"{self.path} ({self.size_gib:.2f} GiB, {self.model})"


@dataclass(frozen=True)
class InterfaceInfo:
    name: str
    mac: str
    addresses: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class NetworkInfo:
    interfaces: Dict[str, InterfaceInfo]
    hostname: Optional[str] = None
    domain: Optional[str] = None
    gateway: Optional[str] = None
    dns: List[str] = field(default_factory=list)
    default_interface: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "NetworkInfo":
        return cls(
            interfaces={
                name: InterfaceInfo(
                    name=name,
                    mac=i.get("mac", ""),
                    addresses=list(i.get("addresses", [])),
                )
                for name, i in sorted(data.get("interfaces", {}).items())
            },
            hostname=data.get("hostname"),
            domain=data.get("domain"),
            gateway=data.get("gateway"),
            dns=list(data.get("dns", [])),
            default_interface=data.get("default_interface"),
        )


@dataclass(frozen=True)
class RuntimeInfo:
    disks: List[Disk]
    network: NetworkInfo
    total_memory: int  # MiB
    hvm_supported: bool
    country: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "RuntimeInfo":
        disks = sorted(
            Disk(index=int(d["index"]), path=d["path"], model=d.get("model", ""),
                 size=int(d["size"]))
            for d in data["disks"]
        )
        return cls(
            disks=disks,
            network=NetworkInfo.from_dict(data.get("network", {})),
            total_memory=int(data["total_memory"]),
            hvm_supported=bool(data.get("hvm_supported", False)),
            country=data.get("country"),
        )


@dataclass(frozen=True)
class InstallerContext:
    """Everything the wizard knows about its environment; never mutated."""

    config: InstallerConfig
    setup_info: SetupInfo
    locales: LocaleInfo
    runtime_info: RuntimeInfo

    @property
    def title(self) -> str:
        s = self.setup_info
        return f"{s.fullname} ({s.release}-{s.isorelease}) Installer"


def _read_json(path: Path) -> dict:
    with open(path) as f:
        return json.load(f)


def _load(path: Path, what: str, parse):
    try:
        return parse(_read_json(path))
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise SetupError(f"Failed to retrieve {what}: {e}") from e


def load_context(config: InstallerConfig) -> InstallerContext:
    data_dir = config.data_dir
    log.info("Loading setup descriptors from %s", data_dir)

    setup_info = _load(data_dir / "iso-info.json", "setup info", SetupInfo.from_dict)
    locales = _load(data_dir / "locales.json", "locale info", LocaleInfo.from_dict)
    runtime_info = _load(
        data_dir / "run-env-info.json", "runtime environment info", RuntimeInfo.from_dict
    )

    if not runtime_info.disks:
        raise SetupError("The installer could not find any supported hard disks.")

    log.info(
        "Setup: product=%s release=%s-%s disks=%d memory=%dMiB",
        setup_info.product, setup_info.release, setup_info.isorelease,
        len(runtime_info.disks), runtime_info.total_memory,
    )
    return InstallerContext(
        config=config,
        setup_info=setup_info,
        locales=locales,
        runtime_info=runtime_info,
    )


def read_eula(setup_info: SetupInfo) -> str:
    try:
        return (setup_info.iso_path / "EULA").read_text()
    except OSError:
        return EULA_PLACEHOLDER


def late_setup_warnings(context: InstallerContext, kb_layout: str) -> List[str]:
    """Non-fatal environment checks run once the first screen is up."""
    from system import set_keyboard_layout

    warnings: List[str] = []

    if not context.config.in_test_mode:
        kmap = context.locales.kmap.get(kb_layout)
        if kmap is not None:
            try:
                set_keyboard_layout(kmap)
            except (OSError, subprocess.CalledProcessError) as e:
                log.warning("Keyboard layout %s not applied: %s", kmap.id, e)
                warnings.append(f"Failed to apply keyboard layout: {e}")

    if context.runtime_info.total_memory < MIN_MEMORY_MIB:
        warnings.append(
            "Less than 1 GiB of usable memory detected, installation will probably fail.\n\n"
            "See 'System Requirements' in the documentation."
        )

    if context.setup_info.product == "pve" and not context.runtime_info.hvm_supported:
        warnings.append(
            "No support for hardware-accelerated KVM virtualization detected.\n\n"
            "Check BIOS settings for Intel VT / AMD-V / SVM."
        )

    for w in warnings:
        log.warning("Late setup: %s", w.splitlines()[0])
    return warnings

# state.py
from __future__ import annotations
import ipaddress
from dataclasses import dataclass, field, replace
from typing import Any, List, Tuple, Union
from environment import InstallerContext, LocaleInfo, NetworkInfo, RuntimeInfo
from flow import Step

FILESYSTEMS = ["ext4", "xfs", "zfs (RAID0)", "btrfs (RAID0)"]
DEFAULT_COUNTRY = "at"
DEFAULT_FQDN = "pve.example.invalid"
FALLBACK_ADDRESS = "192.168.100.2/24"
FALLBACK_GATEWAY = "192.168.100.1"

IPInterface = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]
IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class BootdiskOptions:
    target_disk: str = ""
    filesystem: str = FILESYSTEMS[0]
    hdsize: float = 0.0  # GiB

    @classmethod
    def defaults_from(cls, runtime: RuntimeInfo) -> "BootdiskOptions":
        disk = runtime.disks[0]
        return cls(target_disk=disk.path, hdsize=round(disk.size_gib, 2))


@dataclass(frozen=True)
class TimezoneOptions:
    country: str = DEFAULT_COUNTRY
    timezone: str = "Europe/Vienna"
    kb_layout: str = "de"

    @classmethod
    def defaults_from(cls, runtime: RuntimeInfo, locales: LocaleInfo) -> "TimezoneOptions":
        country = runtime.country if runtime.country in locales.countries else DEFAULT_COUNTRY
        info = locales.countries.get(country)
        if info is None:
            return cls()
        return cls(country=country, timezone=info.zone, kb_layout=info.kmap)


@dataclass(frozen=True)
class PasswordOptions:
    root_password: str = ""
    email: str = "mail@example.invalid"


@dataclass(frozen=True)
class NetworkOptions:
    ifname: str = ""
    fqdn: str = DEFAULT_FQDN
    address: IPInterface = ipaddress.ip_interface(FALLBACK_ADDRESS)
    gateway: IPAddress = ipaddress.ip_address(FALLBACK_GATEWAY)
    dns_server: IPAddress = ipaddress.ip_address(FALLBACK_GATEWAY)

    @classmethod
    def defaults_from(cls, network: NetworkInfo) -> "NetworkOptions":
        ifname = network.default_interface or next(iter(network.interfaces), "")
        opts = cls(ifname=ifname)

        if network.hostname and network.domain:
            opts = replace(opts, fqdn=f"{network.hostname}.{network.domain}")

        iface = network.interfaces.get(ifname)
        if iface is not None and iface.addresses:
            opts = replace(opts, address=ipaddress.ip_interface(iface.addresses[0]))
        if network.gateway:
            opts = replace(opts, gateway=ipaddress.ip_address(network.gateway))
        if network.dns:
            opts = replace(opts, dns_server=ipaddress.ip_address(network.dns[0]))
        return opts


@dataclass
class InstallerOptions:
    """Options collected so far; each part is either default or validated."""

    bootdisk: BootdiskOptions = field(default_factory=BootdiskOptions)
    timezone: TimezoneOptions = field(default_factory=TimezoneOptions)
    password: PasswordOptions = field(default_factory=PasswordOptions)
    network: NetworkOptions = field(default_factory=NetworkOptions)
    autoreboot: bool = False

    @classmethod
    def defaults(cls, context: InstallerContext) -> "InstallerOptions":
        runtime = context.runtime_info
        return cls(
            bootdisk=BootdiskOptions.defaults_from(runtime),
            timezone=TimezoneOptions.defaults_from(runtime, context.locales),
            network=NetworkOptions.defaults_from(runtime.network),
        )

    def apply(self, step: Step, value: Any) -> None:
        if step is Step.LICENSE:
            return
        if step is Step.BOOTDISK:
            self.bootdisk = value
        elif step is Step.TIMEZONE:
            self.timezone = value
        elif step is Step.PASSWORD:
            self.password = value
        elif step is Step.NETWORK:
            self.network = value
        elif step is Step.SUMMARY:
            self.autoreboot = bool(value)
        else:
            raise ValueError(f"step {step.name} carries no options")

    def to_summary(self, locales: LocaleInfo) -> List[Tuple[str, str]]:
        country = locales.countries.get(self.timezone.country)
        kmap = locales.kmap.get(self.timezone.kb_layout)
        return [
            ("Bootdisk filesystem", self.bootdisk.filesystem),
            ("Bootdisk", self.bootdisk.target_disk),
            ("Disk size", f"{self.bootdisk.hdsize:.2f} GiB"),
            ("Timezone", self.timezone.timezone),
            ("Keyboard layout", kmap.name if kmap else self.timezone.kb_layout),
            ("Country", country.name if country else self.timezone.country),
            ("Administrator email", self.password.email),
            ("Management interface", self.network.ifname),
            ("Hostname", self.network.fqdn),
            ("Host IP (CIDR)", str(self.network.address)),
            ("Gateway", str(self.network.gateway)),
            ("DNS", str(self.network.dns_server)),
        ]

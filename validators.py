# validators.py
from __future__ import annotations
import ipaddress
import re
from typing import Tuple, Union

IPInterface = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]

MIN_PASSWORD_LEN = 5
PLACEHOLDER_EMAIL = "mail@example.invalid"
EMAIL_RE = re.compile(r"^[\w+\-~]+(\.[\w+\-~]+)*@[a-zA-Z0-9\-]+(\.[a-zA-Z0-9\-]+)*$")
LABEL_RE = re.compile(r"^[a-zA-Z0-9]([a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?$")


class ValidationError(ValueError):
    """User input on a wizard step that cannot be accepted as is."""


def validate_password(password: str, confirm: str) -> Tuple[bool, str]:
    if len(password) < MIN_PASSWORD_LEN:
        return False, f"password too short, must be at least {MIN_PASSWORD_LEN} characters long"
    if password != confirm:
        return False, "passwords do not match"
    return True, ""

def validate_email(email: str) -> Tuple[bool, str]:
    if email == PLACEHOLDER_EMAIL:
        return False, "invalid email address"
    if not EMAIL_RE.match(email):
        return False, "Email does not look like a valid address (user@domain.tld)"
    return True, ""

def validate_fqdn(fqdn: str) -> Tuple[bool, str]:
    """Host name plus at least one domain label, e.g. 'pve.example.com'."""
    if len(fqdn) > 253:
        return False, "hostname does not look valid: name too long"
    labels = fqdn.split(".")
    if len(labels) < 2:
        return False, "hostname does not look valid: domain part missing"
    for label in labels:
        if not LABEL_RE.match(label):
            return False, f"hostname does not look valid: invalid label '{label}'"
    if labels[0].isdigit():
        return False, "hostname does not look valid: host name must not be numeric"
    if fqdn.endswith(".invalid"):
        return False, "hostname does not look valid"
    return True, ""

def split_fqdn(fqdn: str) -> Tuple[str, str]:
    """'pve.example.com' -> ('pve', 'example.com')"""
    host, _, domain = fqdn.partition(".")
    return host, domain

def parse_cidr(cidr: str) -> IPInterface:
    """Parse '192.168.1.10/24' into an interface. Raises ValueError on bad input."""
    if "/" not in cidr:
        raise ValueError(f"'{cidr}' is not in CIDR notation (address/prefix)")
    return ipaddress.ip_interface(cidr.strip())

def validate_ip(address: str) -> Tuple[bool, str]:
    try:
        ipaddress.ip_address(address)
    except ValueError:
        return False, f"'{address}' is not a valid IP address."
    return True, ""

def validate_same_version(host: IPInterface, other: str, what: str) -> Tuple[bool, str]:
    if host.version != ipaddress.ip_address(other).version:
        return False, f"host and {what} IP address version must not differ"
    return True, ""

def parse_hdsize(value: str, max_gib: float) -> float:
    """Parse a disk size in GiB. Raises ValueError if not within (0, max_gib]."""
    try:
        size = float(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a number") from None
    if not 0 < size <= max_gib:
        raise ValueError(f"size must be between 0 and {max_gib:.2f} GiB")
    return size

# screens/s05_network.py
from __future__ import annotations
import ipaddress
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Input, Label, Select
from flow import Step
from screens.step import StepScreen, initial_value
from state import NetworkOptions
from validators import (
    ValidationError, parse_cidr, validate_fqdn, validate_ip, validate_same_version,
)
from logger import log


class NetworkScreen(StepScreen):
    """Step 5: Management interface, hostname and static addressing."""

    STEP = Step.NETWORK

    def compose(self) -> ComposeResult:
        network = self.app.context.runtime_info.network
        options = self.app.options.network
        iface_options = [
            (f"{i.name}  {i.mac}", i.name) for i in network.interfaces.values()
        ]

        yield from self.compose_header()
        with VerticalScroll(id="form"):
            yield Label("Management interface:")
            yield Select(
                iface_options, value=initial_value(options.ifname, iface_options),
                allow_blank=not iface_options, prompt="Choose interface…", id="sel_iface",
            )
            yield Label("Hostname (FQDN):")
            yield Input(value=options.fqdn, id="inp_fqdn")
            yield Label("IP address (CIDR):")
            yield Input(value=str(options.address), placeholder="e.g. 192.168.100.2/24",
                        id="inp_cidr")
            yield Label("Gateway address:")
            yield Input(value=str(options.gateway), id="inp_gw")
            yield Label("DNS server address:")
            yield Input(value=str(options.dns_server), id="inp_dns")
        yield from self.compose_nav()

    def collect_options(self) -> NetworkOptions:
        ifname = self.query_one("#sel_iface", Select).value
        if ifname is Select.NULL:
            raise ValidationError("no management interface selected")

        fqdn = self.query_one("#inp_fqdn", Input).value.strip()
        ok, msg = validate_fqdn(fqdn)
        if not ok:
            raise ValidationError(msg)

        try:
            address = parse_cidr(self.query_one("#inp_cidr", Input).value.strip())
        except ValueError as e:
            raise ValidationError(str(e)) from None

        gateway = self.query_one("#inp_gw", Input).value.strip()
        dns = self.query_one("#inp_dns", Input).value.strip()
        for value, what in ((gateway, "gateway"), (dns, "DNS")):
            ok, msg = validate_ip(value)
            if not ok:
                raise ValidationError(msg)
            ok, msg = validate_same_version(address, value, what)
            if not ok:
                raise ValidationError(msg)

        log.info(
            "Step 5: iface=%s fqdn=%s ip=%s gw=%s dns=%s",
            ifname, fqdn, address, gateway, dns,
        )
        return NetworkOptions(
            ifname=str(ifname),
            fqdn=fqdn,
            address=address,
            gateway=ipaddress.ip_address(gateway),
            dns_server=ipaddress.ip_address(dns),
        )

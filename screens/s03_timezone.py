# screens/s03_timezone.py
from __future__ import annotations
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Label, Select
from flow import Step
from screens.step import StepScreen, initial_value
from state import TimezoneOptions
from validators import ValidationError
from logger import log


class TimezoneScreen(StepScreen):
    """Step 3: Country, time zone and keyboard layout."""

    STEP = Step.TIMEZONE

    def compose(self) -> ComposeResult:
        locales = self.app.context.locales
        options = self.app.options.timezone

        countries = sorted(locales.countries.items(), key=lambda kv: kv[1].name)
        country_options = [(c.name, cc) for cc, c in countries]
        country = options.country
        if initial_value(country, country_options) is Select.NULL:
            country = country_options[0][1]
        # Country whose zones the zone Select currently offers
        self._zone_country = country
        zone_options = self._zone_options(country)
        kmap_options = [(k.name, k.id) for k in sorted(locales.kmap.values(), key=lambda k: k.name)]

        yield from self.compose_header()
        with VerticalScroll(id="form"):
            yield Label("Country:")
            yield Select(country_options, value=country, allow_blank=False, id="sel_country")
            yield Label("Timezone:")
            yield Select(
                zone_options, value=initial_value(options.timezone, zone_options),
                allow_blank=False, id="sel_zone",
            )
            yield Label("Keyboard layout:")
            yield Select(
                kmap_options, value=initial_value(options.kb_layout, kmap_options),
                allow_blank=False, id="sel_kmap",
            )
        yield from self.compose_nav()

    def _zone_options(self, country: str):
        zones = self.app.context.locales.cczones.get(country) or ["UTC"]
        return [(z, z) for z in zones]

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id != "sel_country" or event.value == self._zone_country:
            return
        self._zone_country = event.value

        zone_sel = self.query_one("#sel_zone", Select)
        zone_options = self._zone_options(event.value)
        zone_sel.set_options(zone_options)
        info = self.app.context.locales.countries.get(event.value)
        if info is not None and info.zone in [z for _, z in zone_options]:
            zone_sel.value = info.zone

    def collect_options(self) -> TimezoneOptions:
        locales = self.app.context.locales
        country = self.query_one("#sel_country", Select).value
        zone = self.query_one("#sel_zone", Select).value
        kmap = self.query_one("#sel_kmap", Select).value

        if country not in locales.countries:
            raise ValidationError("unknown country")
        if zone not in (locales.cczones.get(country) or ["UTC"]):
            raise ValidationError(f"time zone {zone} does not belong to the selected country")
        if kmap not in locales.kmap:
            raise ValidationError("unknown keyboard layout")

        log.info("Step 3: country=%s zone=%s kmap=%s", country, zone, kmap)
        return TimezoneOptions(country=country, timezone=zone, kb_layout=kmap)

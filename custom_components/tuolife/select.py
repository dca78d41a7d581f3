"""Mode select platform for TuoLife bulbs."""
from __future__ import annotations

import logging
from typing import List

from homeassistant.components.select import SelectEntity
from homeassistant.core import callback
from homeassistant.helpers import entity_registry as er
from homeassistant.helpers.dispatcher import async_dispatcher_connect

from .const import DOMAIN, KNOWN_MODES, SIGNAL_ACCESSORIES_ADDED, SIGNAL_ACCESSORY_REMOVED
from .light import accessory_device_info
from .models import AccessoryRecord
from .relay import TuoLifeCommandRelay

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up mode Select entities."""
    entry_data = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if not entry_data:
        return

    relay: TuoLifeCommandRelay = entry_data["relay"]
    reconciler = entry_data["reconciler"]

    @callback
    def _add(records: List[AccessoryRecord]) -> None:
        async_add_entities([TuoLifeModeSelect(relay, record) for record in records])

    if reconciler.accessories:
        _add(list(reconciler.accessories.values()))

    entry.async_on_unload(async_dispatcher_connect(hass, SIGNAL_ACCESSORIES_ADDED, _add))


class TuoLifeModeSelect(SelectEntity):
    """Select entity exposing the cloud lighting mode."""

    _attr_icon = "mdi:palette"
    _attr_should_poll = False

    def __init__(self, relay: TuoLifeCommandRelay, record: AccessoryRecord):
        self._relay = relay
        self._record = record
        self._attr_name = f"{record.display_name} Mode"
        self._attr_unique_id = f"{record.uuid}_mode"

    async def async_added_to_hass(self):
        self.async_on_remove(self._record.add_listener(self.async_write_ha_state))
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass, SIGNAL_ACCESSORY_REMOVED.format(self._record.uuid), self._async_handle_removed
            )
        )

    async def _async_handle_removed(self) -> None:
        ent_reg = er.async_get(self.hass)
        if self.registry_entry is not None and ent_reg.async_get(self.entity_id):
            ent_reg.async_remove(self.entity_id)
        else:
            await self.async_remove(force_remove=True)

    @property
    def options(self) -> List[str]:
        current = self.current_option
        # Modes set from the TuoLife app may not be in the known list
        if current and current not in KNOWN_MODES:
            return KNOWN_MODES + [current]
        return list(KNOWN_MODES)

    @property
    def current_option(self) -> str | None:
        dev = self._record.context.device
        return dev.mode_id if dev else None

    async def async_select_option(self, option: str) -> None:
        self._relay.apply_mode(self._record, option)

    @property
    def device_info(self):
        return accessory_device_info(self._record)

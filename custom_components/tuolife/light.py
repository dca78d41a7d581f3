"""TuoLife light platform."""
import logging
from typing import List

from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ColorMode,
    LightEntity,
)
from homeassistant.core import callback
from homeassistant.helpers import entity_registry as er
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.util.color import brightness_to_value, value_to_brightness

from .const import DOMAIN, MANUFACTURER, SIGNAL_ACCESSORIES_ADDED, SIGNAL_ACCESSORY_REMOVED
from .models import AccessoryRecord
from .projector import CHAR_BRIGHTNESS, CHAR_ON
from .relay import TuoLifeCommandRelay

_LOGGER = logging.getLogger(__name__)

# TuoLife brightness is a 1-100 percentage; HA uses 0-255
BRIGHTNESS_SCALE = (1, 100)


async def async_setup_entry(hass, entry, async_add_entities):
    """Set up the TuoLife Light platform."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    relay: TuoLifeCommandRelay = entry_data["relay"]
    reconciler = entry_data["reconciler"]

    @callback
    def _add(records: List[AccessoryRecord]) -> None:
        entities = [TuoLifeLightEntity(relay, record) for record in records]
        _LOGGER.debug("Registering %s TuoLife light entities", len(entities))
        async_add_entities(entities)

    # Cached accessories restored before the first sync
    if reconciler.accessories:
        _add(list(reconciler.accessories.values()))

    entry.async_on_unload(async_dispatcher_connect(hass, SIGNAL_ACCESSORIES_ADDED, _add))


def accessory_device_info(record: AccessoryRecord):
    dev = record.context.device
    return {
        "identifiers": {(DOMAIN, record.uuid)},
        "name": record.display_name,
        "manufacturer": MANUFACTURER,
        "model": f"Generation {dev.generation}" if dev else None,
        "sw_version": (dev.firmware_version or None) if dev else None,
        "serial_number": dev.bulb_id if dev else None,
    }


class TuoLifeLightEntity(LightEntity):
    """Representation of a TuoLife bulb."""

    _attr_should_poll = False
    _attr_color_mode = ColorMode.BRIGHTNESS
    _attr_supported_color_modes = {ColorMode.BRIGHTNESS}

    def __init__(self, relay: TuoLifeCommandRelay, record: AccessoryRecord):
        self._relay = relay
        self._record = record
        self._attr_unique_id = record.uuid
        self._attr_name = record.display_name

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
    def is_on(self):
        return bool(self._record.characteristics.get(CHAR_ON, False))

    @property
    def brightness(self):
        value = self._record.characteristics.get(CHAR_BRIGHTNESS)
        if value is None:
            return None
        return value_to_brightness(BRIGHTNESS_SCALE, max(0, min(100, int(value))))

    @property
    def extra_state_attributes(self):
        dev = self._record.context.device
        if dev is None:
            return None
        return {
            "mode": dev.mode_id,
            "cloud_available": dev.is_available,
            "group_id": dev.group_id,
        }

    @property
    def device_info(self):
        return accessory_device_info(self._record)

    async def async_turn_on(self, **kwargs):
        if ATTR_BRIGHTNESS in kwargs:
            level = round(brightness_to_value(BRIGHTNESS_SCALE, kwargs[ATTR_BRIGHTNESS]))
            self._relay.apply_brightness(self._record, max(1, level))
        else:
            self._relay.apply_power(self._record, True)

    async def async_turn_off(self, **kwargs):
        self._relay.apply_power(self._record, False)

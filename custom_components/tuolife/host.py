"""Home Assistant side of the accessory lifecycle."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from homeassistant.config_entries import ConfigEntry  # type: ignore
from homeassistant.core import HomeAssistant, callback  # type: ignore
from homeassistant.helpers import device_registry as dr
from homeassistant.helpers.dispatcher import async_dispatcher_send

from .accessory_storage import TuoLifeAccessoryStorage
from .const import DOMAIN, SIGNAL_ACCESSORIES_ADDED, SIGNAL_ACCESSORY_REMOVED
from .models import AccessoryRecord

_LOGGER = logging.getLogger(__name__)


class TuoLifeAccessoryHost:
    """Create, register and unregister accessories for one config entry.

    Registered records are announced to the light and select platforms over
    the dispatcher; the platforms own the entities. Every change is written
    to the accessory cache.
    """

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry, storage: TuoLifeAccessoryStorage):
        self._hass = hass
        self._entry = entry
        self._storage = storage
        self.records: Dict[str, AccessoryRecord] = {}

    async def async_restore(self) -> List[AccessoryRecord]:
        """Load cached records from disk."""
        restored = await self._storage.read()
        for record in restored:
            self.records[record.uuid] = record
        _LOGGER.debug("Restored %s accessories from cache", len(restored))
        return restored

    def create_accessory(self, name: str, uuid: str) -> AccessoryRecord:
        return AccessoryRecord(uuid, name)

    @callback
    def register_accessories(self, records: List[AccessoryRecord]) -> None:
        new: List[AccessoryRecord] = []
        for record in records:
            if record.uuid in self.records:
                _LOGGER.error("Accessory %s already registered", record.uuid)
                continue
            self.records[record.uuid] = record
            new.append(record)
        if new:
            async_dispatcher_send(self._hass, SIGNAL_ACCESSORIES_ADDED, new)
            self._schedule_save()

    @callback
    def unregister_accessories(self, records: List[AccessoryRecord]) -> None:
        dev_reg = dr.async_get(self._hass)
        for record in records:
            self.records.pop(record.uuid, None)
            async_dispatcher_send(self._hass, SIGNAL_ACCESSORY_REMOVED.format(record.uuid))
            device_entry = dev_reg.async_get_device(identifiers={(DOMAIN, record.uuid)})
            if device_entry is not None:
                dev_reg.async_remove_device(device_entry.id)
        self._schedule_save()

    @callback
    def _schedule_save(self) -> None:
        self._hass.async_create_task(self.async_save())

    async def async_save(self, records: Iterable[AccessoryRecord] | None = None) -> None:
        await self._storage.write(list(records if records is not None else self.records.values()))

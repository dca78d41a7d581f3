"""Reconcile fetched TuoLife devices against the known accessory records.

Each bulb is identified only by its ``bulb_id``; the accessory uuid is derived
from it. A pass updates known records in place, creates and registers records
for unseen bulbs, projects state for every surviving record and finally
unregisters records whose bulb is no longer in the account.
"""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Protocol, Set

from .const import DEFAULT_LOCAL_HOLD
from .models import AccessoryRecord, TuoLifeDevice
from .projector import project

_LOGGER = logging.getLogger(__name__)

_UUID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, "thetuolife.com")


def accessory_uuid(bulb_id: str) -> str:
    """Stable accessory uuid for a bulb."""
    return str(uuid.uuid5(_UUID_NAMESPACE, str(bulb_id)))


class AccessoryHost(Protocol):
    """What the reconciler needs from the host platform."""

    def create_accessory(self, name: str, uuid: str) -> AccessoryRecord:
        ...

    def register_accessories(self, records: List[AccessoryRecord]) -> None:
        ...

    def unregister_accessories(self, records: List[AccessoryRecord]) -> None:
        ...


@dataclass
class ReconcileResult:
    added: List[AccessoryRecord] = field(default_factory=list)
    updated: List[AccessoryRecord] = field(default_factory=list)
    removed: List[AccessoryRecord] = field(default_factory=list)


class TuoLifeReconciler:
    def __init__(
        self,
        host: AccessoryHost,
        *,
        local_hold: float = DEFAULT_LOCAL_HOLD,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._host = host
        self._local_hold = local_hold
        self._clock = clock
        self.accessories: Dict[str, AccessoryRecord] = {}

    def configure_accessory(self, record: AccessoryRecord) -> None:
        """Adopt a record restored from the cache; the host already knows it."""
        device = record.context.device
        _LOGGER.info("Loading accessory from cache: %s", record.display_name)
        if device is not None:
            _LOGGER.debug(
                "Cached state for %s: mode=%s brightness=%s",
                record.display_name, device.mode_id, device.brightness,
            )
        self.accessories[record.uuid] = record
        if device is not None:
            record.remember_on_brightness()
            project(record)

    def _held_locally(self, record: AccessoryRecord) -> bool:
        if not self._local_hold or not record.last_changed:
            return False
        return (self._clock() - record.last_changed) < self._local_hold

    def _update_record(self, record: AccessoryRecord, device: TuoLifeDevice) -> None:
        current = record.context.device
        if current is None:
            record.context.device = device
            return
        held = self._held_locally(record)
        if held:
            _LOGGER.debug(
                "Keeping local state for %s (changed %.1fs ago), polled mode=%s brightness=%s",
                record.display_name, self._clock() - record.last_changed, device.mode_id, device.brightness,
            )
        current.update_state(device, include_power=not held)

    def reconcile(self, devices: Iterable[TuoLifeDevice]) -> ReconcileResult:
        """Align self.accessories with one fetched device list."""
        result = ReconcileResult()
        discovered: Set[str] = set()

        for device in devices:
            if not device.bulb_id:
                _LOGGER.error("Device missing bulbId, skipping: %s", device)
                continue

            acc_uuid = accessory_uuid(device.bulb_id)
            if acc_uuid in discovered:
                _LOGGER.warning("Bulb %s listed more than once, ignoring duplicate", device.bulb_id)
                continue

            record = self.accessories.get(acc_uuid)
            if record is not None:
                self._update_record(record, device)
                result.updated.append(record)
            else:
                _LOGGER.info("Adding new accessory: %s", device.nickname or device.bulb_id)
                record = self._host.create_accessory(device.nickname or device.bulb_id, acc_uuid)
                record.context.device = device
                self.accessories[acc_uuid] = record
                result.added.append(record)

            record.remember_on_brightness()
            project(record)
            discovered.add(acc_uuid)

        if result.added:
            self._host.register_accessories(result.added)

        # Bulbs deleted from the cloud account
        result.removed = [r for u, r in self.accessories.items() if u not in discovered]
        if result.removed:
            for record in result.removed:
                _LOGGER.info("Removing existing accessory from cache: %s", record.display_name)
                del self.accessories[record.uuid]
            self._host.unregister_accessories(result.removed)

        _LOGGER.debug(
            "Reconciled %s devices: added=%s updated=%s removed=%s",
            len(discovered), len(result.added), len(result.updated), len(result.removed),
        )
        return result

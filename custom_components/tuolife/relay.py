"""Relay local user changes to the TuoLife cloud."""
from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from typing import Callable, Set

from .api import TuoLifeClient
from .const import MODE_OFF, MODE_ON, OFF_BRIGHTNESS
from .models import AccessoryRecord, TuoLifeDevice
from .projector import project

_LOGGER = logging.getLogger(__name__)


class TuoLifeCommandRelay:
    """Apply a change locally first, then send the full snapshot upstream.

    The host sees the new state immediately; the send runs as a background
    task and its failure is only logged.
    """

    def __init__(self, client: TuoLifeClient, clock: Callable[[], float] = time.monotonic):
        self._client = client
        self._clock = clock
        self._pending: Set[asyncio.Task] = set()

    def apply_power(self, record: AccessoryRecord, desired: bool) -> None:
        _LOGGER.debug("%s %s", "Turning on" if desired else "Turning off", record.display_name)
        if desired:
            self._turn_on(record, MODE_ON)
        else:
            self._turn_off(record)

    def apply_brightness(self, record: AccessoryRecord, level: int) -> None:
        device = self._device(record)
        device.brightness = int(level)
        # Setting brightness implies power on
        device.mode_id = MODE_ON
        record.remember_on_brightness()
        _LOGGER.debug("Set brightness of %s -> %s", record.display_name, level)
        self._commit(record, device)

    def apply_mode(self, record: AccessoryRecord, mode_id: str) -> None:
        _LOGGER.debug("Set mode of %s -> %s", record.display_name, mode_id)
        if mode_id == MODE_OFF:
            self._turn_off(record)
        else:
            self._turn_on(record, mode_id)

    def _turn_on(self, record: AccessoryRecord, mode_id: str) -> None:
        device = self._device(record)
        if not device.is_on and record.last_on_brightness:
            device.brightness = record.last_on_brightness
        device.mode_id = mode_id
        record.remember_on_brightness()
        self._commit(record, device)

    def _turn_off(self, record: AccessoryRecord) -> None:
        device = self._device(record)
        record.remember_on_brightness()
        device.mode_id = MODE_OFF
        device.brightness = OFF_BRIGHTNESS
        self._commit(record, device)

    async def async_wait_idle(self) -> None:
        """Wait for all upstream sends scheduled so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @staticmethod
    def _device(record: AccessoryRecord) -> TuoLifeDevice:
        if record.context.device is None:
            # Only possible for a record that was never reconciled
            record.context.device = TuoLifeDevice(bulb_id="", nickname=record.display_name)
        return record.context.device

    def _commit(self, record: AccessoryRecord, device: TuoLifeDevice) -> None:
        record.last_changed = self._clock()
        project(record)
        snapshot = dataclasses.replace(device)
        task = asyncio.get_running_loop().create_task(self._async_send(record, snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _async_send(self, record: AccessoryRecord, snapshot: TuoLifeDevice) -> None:
        try:
            ok, err = await self._client.start_room_mode(snapshot)
        except Exception as ex:  # pylint: disable=broad-except
            ok, err = False, f"Exception: {ex}"
        if ok:
            _LOGGER.debug("Successfully sent update to server for %s", record.display_name)
        else:
            _LOGGER.error("Error sending update for %s to server: %s", record.display_name, err)
            _LOGGER.debug("Device body: %s", snapshot.to_mode_payload())

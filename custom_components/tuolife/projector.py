"""Project device state onto an accessory's characteristics."""
from __future__ import annotations

import logging

from .const import MODE_OFF
from .models import AccessoryRecord, ProjectedState

_LOGGER = logging.getLogger(__name__)

CHAR_ON = "on"
CHAR_BRIGHTNESS = "brightness"


def project(record: AccessoryRecord) -> ProjectedState | None:
    """Push power and brightness from record.context.device to the record.

    Uses the listener-only update path, so set handlers (and with them the
    command relay) are never invoked from here.
    """
    device = record.context.device
    if device is None:
        _LOGGER.debug("Nothing to project for %s, no device context", record.uuid)
        return None
    state = ProjectedState(on=device.mode_id != MODE_OFF, brightness=int(device.brightness))
    record.update_characteristics(**{CHAR_ON: state.on, CHAR_BRIGHTNESS: state.brightness})
    return state

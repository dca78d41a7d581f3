"""Periodic cloud sync for TuoLife accessories."""
from __future__ import annotations

import logging

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import TuoLifeClient
from .const import DOMAIN
from .reconciler import ReconcileResult, TuoLifeReconciler

_LOGGER = logging.getLogger(__name__)


class TuoLifeDataUpdateCoordinator(DataUpdateCoordinator):
    """Fetch devices on an interval and hand them to the reconciler.

    Only one pass runs at a time: a refresh triggered while another is still
    awaiting its fetch is dropped, not queued. A failed fetch raises
    UpdateFailed, which skips the pass so accessories are not unregistered
    because of a transient error.
    """

    def __init__(self, hass, client: TuoLifeClient, reconciler: TuoLifeReconciler, update_interval=None, *, config_entry):
        self._client = client
        self._reconciler = reconciler
        self._in_progress = False
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            config_entry=config_entry,
            update_interval=update_interval,
            update_method=self._async_update,
        )

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    async def _async_update(self) -> ReconcileResult | None:
        """Fetch devices from the TuoLife cloud and reconcile them."""
        if self._in_progress:
            _LOGGER.debug("Device discovery already in progress, skipping")
            return self.data
        self._in_progress = True
        try:
            devices, err = await self._client.get_devices()
            if err:
                raise UpdateFailed(err)
            return self._reconciler.reconcile(devices)
        finally:
            self._in_progress = False

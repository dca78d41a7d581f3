"""The TuoLife integration."""
import logging
from datetime import timedelta

import homeassistant.helpers.config_validation as cv  # type: ignore
from homeassistant.config_entries import ConfigEntry  # type: ignore
from homeassistant.core import HomeAssistant  # type: ignore

from .accessory_storage import TuoLifeAccessoryStorage
from .api import TuoLifeClient
from .const import (
    CONF_API_KEY,
    CONF_LOCAL_HOLD,
    CONF_SCAN_INTERVAL,
    DEFAULT_LOCAL_HOLD,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
)
from .coordinator import TuoLifeDataUpdateCoordinator
from .host import TuoLifeAccessoryHost
from .reconciler import TuoLifeReconciler
from .relay import TuoLifeCommandRelay

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[str] = ["light", "select"]

# This integration is config-entry only (no YAML options)
CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


async def async_setup(hass: HomeAssistant, config: dict):
    """Set up the TuoLife integration (YAML not supported)."""
    hass.data.setdefault(DOMAIN, {})
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Set up TuoLife from a config entry."""
    api_key = entry.options.get(CONF_API_KEY) or entry.data.get(CONF_API_KEY) or ""
    if not api_key:
        _LOGGER.error("No API key provided in config. TuoLife may not function correctly.")

    scan_interval = entry.options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL)
    local_hold = entry.options.get(CONF_LOCAL_HOLD, DEFAULT_LOCAL_HOLD)

    client = await TuoLifeClient.create(api_key, hass)
    storage = TuoLifeAccessoryStorage(hass.config.config_dir, hass)
    host = TuoLifeAccessoryHost(hass, entry, storage)
    reconciler = TuoLifeReconciler(host, local_hold=local_hold)
    for record in await host.async_restore():
        reconciler.configure_accessory(record)

    relay = TuoLifeCommandRelay(client)
    coordinator = TuoLifeDataUpdateCoordinator(
        hass,
        client,
        reconciler,
        update_interval=timedelta(seconds=max(1, int(scan_interval))),
        config_entry=entry,
    )

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "client": client,
        "host": host,
        "reconciler": reconciler,
        "relay": relay,
        "coordinator": coordinator,
    }

    # Platforms add entities for cached records and subscribe to new ones
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    await coordinator.async_refresh()
    if not coordinator.last_update_success:
        _LOGGER.warning("Could not load TuoLife devices at startup: %s", coordinator.last_exception)

    # The coordinator only polls while it has a listener; entities listen to records
    entry.async_on_unload(coordinator.async_add_listener(lambda: None))
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        entry_data = hass.data[DOMAIN].pop(entry.entry_id, {})
        coordinator = entry_data.get("coordinator")
        if coordinator:
            await coordinator.async_shutdown()
        relay = entry_data.get("relay")
        if relay:
            await relay.async_wait_idle()
        host = entry_data.get("host")
        if host:
            # Persist last known device state for the next start
            await host.async_save()
        client = entry_data.get("client")
        if client:
            await client.close()

    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry):
    """Handle reload of a config entry."""
    await hass.config_entries.async_reload(entry.entry_id)

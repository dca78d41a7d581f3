"""Config flow for TuoLife integration."""

import logging
import voluptuous as vol  # pyright: ignore[reportMissingImports]

from homeassistant import config_entries, exceptions  # type: ignore
import homeassistant.helpers.config_validation as cv  # type: ignore
from homeassistant.core import callback  # type: ignore

from .api import TuoLifeClient
from .const import (
    CONF_API_KEY,
    CONF_LOCAL_HOLD,
    CONF_SCAN_INTERVAL,
    DEFAULT_LOCAL_HOLD,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)


async def _validate_api_key(hass, api_key: str) -> None:
    """Fetch the room list once; raise CannotConnect on any error."""
    client = await TuoLifeClient.create(api_key, hass)
    try:
        _, err = await client.get_rooms()
    finally:
        await client.close()
    if err:
        raise CannotConnect(err)


class TuoLifeFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for TuoLife."""

    VERSION = 1
    CONNECTION_CLASS = config_entries.CONN_CLASS_CLOUD_POLL

    async def async_step_user(self, user_input=None):
        """Handle the initial step."""
        errors = {}
        if user_input is not None:
            # An empty key is accepted; setup logs it and cloud calls fail
            data = {CONF_API_KEY: user_input.get(CONF_API_KEY, "").strip()}
            if not data[CONF_API_KEY]:
                _LOGGER.warning("TuoLife configured without an API key")
                return self.async_create_entry(title="TuoLife", data=data)
            try:
                await _validate_api_key(self.hass, data[CONF_API_KEY])
            except CannotConnect as conn_ex:
                _LOGGER.warning("Cannot connect: %s", conn_ex)
                errors["base"] = "cannot_connect"
            else:
                return self.async_create_entry(title="TuoLife", data=data)

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_API_KEY, default=""): cv.string,
                }
            ),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Get the options flow."""
        return TuoLifeOptionsFlowHandler(config_entry)


class TuoLifeOptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options."""

    def __init__(self, config_entry):
        # Do not assign to self.config_entry (deprecated in HA 2025.12)
        self._entry = config_entry
        self.options = dict(config_entry.options)

    @property
    def entry(self):
        # Prefer framework-provided property if available
        return getattr(self, "config_entry", self._entry)

    async def async_step_init(self, user_input=None):
        errors = {}

        if user_input is not None:
            try:
                if int(user_input.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL)) < 1:
                    errors[CONF_SCAN_INTERVAL] = "invalid_interval"
            except (TypeError, ValueError):
                errors[CONF_SCAN_INTERVAL] = "invalid_interval"

            if not errors:
                self.options.update(user_input)
                return self.async_create_entry(title="TuoLife", data=self.options)

        current_key = self.entry.options.get(CONF_API_KEY) or self.entry.data.get(CONF_API_KEY, "")
        options_schema = vol.Schema(
            {
                vol.Required(CONF_API_KEY, default=current_key): cv.string,
                vol.Optional(
                    CONF_SCAN_INTERVAL,
                    default=self.entry.options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
                ): cv.positive_int,
                vol.Optional(
                    CONF_LOCAL_HOLD,
                    default=self.entry.options.get(CONF_LOCAL_HOLD, DEFAULT_LOCAL_HOLD),
                ): vol.All(vol.Coerce(int), vol.Range(min=0)),
            }
        )

        return self.async_show_form(step_id="init", data_schema=options_schema, errors=errors)


class CannotConnect(exceptions.HomeAssistantError):
    """Error to indicate we cannot connect."""

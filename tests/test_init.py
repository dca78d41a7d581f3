"""Tests for integration setup."""

from homeassistant.setup import async_setup_component

from custom_components.tuolife import CONFIG_SCHEMA
from custom_components.tuolife.const import DOMAIN


def test_config_schema_passes_through_unrelated_config():
    assert CONFIG_SCHEMA({"light": []}) == {"light": []}


async def test_yaml_setup_is_reported(hass, enable_custom_integrations, caplog):
    assert await async_setup_component(hass, DOMAIN, {DOMAIN: {"api_key": "secret"}})

    assert "does not support YAML" in caplog.text

"""Simple persistent storage for TuoLife accessory records."""
from __future__ import annotations

import dataclasses
import json
import logging
import os
from typing import Dict, Iterable, List

from .models import AccessoryContext, AccessoryRecord, TuoLifeDevice

_LOGGER = logging.getLogger(__name__)

ACCESSORY_SCHEMA_VERSION = 1
_FILENAME = "tuolife_accessories.json"


def _record_to_dict(record: AccessoryRecord) -> dict:
    device = record.context.device
    return {
        "name": record.display_name,
        "device": dataclasses.asdict(device) if device is not None else None,
    }


def _record_from_dict(uuid: str, raw: dict) -> AccessoryRecord:
    device_raw = raw.get("device")
    device = TuoLifeDevice(**device_raw) if isinstance(device_raw, dict) else None
    return AccessoryRecord(uuid, str(raw.get("name") or uuid), AccessoryContext(device=device))


class TuoLifeAccessoryStorage:
    def __init__(self, config_dir: str, hass=None) -> None:
        self._hass = hass
        self._config_dir = config_dir

    def _path(self) -> str:
        # Prefer hass.config.path if hass is provided
        if self._hass is not None:
            return self._hass.config.path(f".storage/{_FILENAME}")
        return os.path.join(self._config_dir, ".storage", _FILENAME)

    async def read(self) -> List[AccessoryRecord]:
        def _read() -> List[AccessoryRecord]:
            path = self._path()
            try:
                with open(path, "r", encoding="utf-8") as f_handle:
                    raw = json.load(f_handle)
            except FileNotFoundError:
                return []
            except (OSError, ValueError) as ex:
                _LOGGER.warning("Could not read accessory cache %s: %s", path, ex)
                return []

            if not isinstance(raw, dict) or raw.get("__schema_version") != ACCESSORY_SCHEMA_VERSION:
                _LOGGER.debug("Ignoring accessory cache with unknown schema")
                return []

            out: List[AccessoryRecord] = []
            payload = raw.get("accessories")
            if isinstance(payload, dict):
                for uuid, value in payload.items():
                    if not isinstance(value, dict):
                        continue
                    try:
                        out.append(_record_from_dict(uuid, value))
                    except TypeError:
                        # ignore malformed entries
                        _LOGGER.debug("Skipping malformed cached accessory %s", uuid)
            return out

        if self._hass is not None:
            return await self._hass.async_add_executor_job(_read)
        return _read()

    async def write(self, records: Iterable[AccessoryRecord]) -> None:
        accessories: Dict[str, dict] = {r.uuid: _record_to_dict(r) for r in records}

        def _write() -> None:
            path = self._path()
            payload = {
                "__schema_version": ACCESSORY_SCHEMA_VERSION,
                "accessories": accessories,
            }
            try:
                os.makedirs(os.path.dirname(path), exist_ok=True)
                with open(path, "w", encoding="utf-8") as f_handle:
                    json.dump(payload, f_handle, ensure_ascii=False)
            except OSError as ex:
                _LOGGER.warning("Could not write accessory cache %s: %s", path, ex)

        if self._hass is not None:
            await self._hass.async_add_executor_job(_write)
        else:
            _write()

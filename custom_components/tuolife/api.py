"""Minimal TuoLife cloud API client."""
import aiohttp
import asyncio
import certifi
import logging
import ssl
from aiohttp import ClientSession
from typing import Any, Dict, List, Tuple

from .const import API_ROOM_MODE_START, API_ROOMS, API_TIMEOUT, MODE_OFF
from .models import TuoLifeDevice, TuoLifeRoom

_LOGGER = logging.getLogger(__name__)


def _as_int(value: Any, default: int = 0) -> int:
    """Coerce wire numbers (sometimes sent as strings) to int."""
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        _LOGGER.debug("Could not coerce %r to int, using %s", value, default)
        return default


_TRUE_STRINGS = {"true", "1", "yes", "on"}


def _as_bool(value: Any, default: bool = False) -> bool:
    """Parse wire booleans; strings like "false" are not truthy."""
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _as_str(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value)


def map_device(raw: Dict[str, Any]) -> TuoLifeDevice:
    """Normalize one raw device object from roomsByUser."""
    _LOGGER.debug("Raw device data: %s", raw)
    bulb_id = raw.get("bulb_ID")
    if not bulb_id:
        _LOGGER.warning("Device missing bulb_ID: %s", raw)
    return TuoLifeDevice(
        bulb_id=_as_str(bulb_id),
        group_id=_as_str(raw.get("groupId")),
        user_id=_as_str(raw.get("userId")),
        device_id=_as_str(raw.get("deviceId")),
        firmware_version=_as_str(raw.get("firmwareVersion")),
        nickname=_as_str(raw.get("nickname")),
        generation=_as_str(raw.get("generation"), "1"),
        mode_id=_as_str(raw.get("modeId"), MODE_OFF),
        brightness=_as_int(raw.get("brightness")),
        red=_as_int(raw.get("red")),
        green=_as_int(raw.get("green")),
        blue=_as_int(raw.get("blue")),
        violet=_as_int(raw.get("violet")),
        white_color=_as_int(raw.get("whiteColor")),
        is_available=_as_bool(raw.get("isAvailable")),
    )


def map_room(raw: Dict[str, Any]) -> TuoLifeRoom:
    """Normalize one room; a missing or malformed device list yields no devices."""
    room = TuoLifeRoom(
        room_id=_as_str(raw.get("id")),
        name=_as_str(raw.get("groupName")),
    )
    devices = raw.get("devices")
    if not isinstance(devices, list):
        _LOGGER.debug("Room %s has no device list", room.room_id or room.name)
        return room
    for entry in devices:
        if not isinstance(entry, dict):
            _LOGGER.warning("Skipping malformed device entry in room %s: %r", room.room_id or room.name, entry)
            continue
        room.devices.append(map_device(entry))
    return room


def devices_from_rooms(rooms: List[TuoLifeRoom]) -> List[TuoLifeDevice]:
    """Flatten rooms into one device list, in room order."""
    return [device for room in rooms for device in room.devices]


class TuoLifeClient:
    def __init__(self, api_key: str, session: aiohttp.ClientSession | None = None):
        self._api_key = api_key
        self._session = session
        self._ssl_context: ssl.SSLContext | None = None
        self._timeout = aiohttp.ClientTimeout(total=API_TIMEOUT)

    @classmethod
    async def create(cls, api_key: str, hass=None):
        """Async-safe constructor."""
        self = cls(api_key)

        # certifi bundle load blocks; keep it off the event loop inside HA
        if hass is not None:
            def _make_ssl():
                return ssl.create_default_context(cafile=certifi.where())
            self._ssl_context = await hass.async_add_executor_job(_make_ssl)
        else:
            self._ssl_context = ssl.create_default_context(cafile=certifi.where())

        await self._init_session()
        return self

    async def _init_session(self):
        """Initialize aiohttp session with SSL context."""
        # Close existing session if already open (important for reloads)
        if self._session and not self._session.closed:
            await self._session.close()

        connector = aiohttp.TCPConnector(ssl=self._ssl_context)
        self._session = ClientSession(connector=connector)

    async def close(self):
        """Gracefully close aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    def _headers(self):
        return {"Authorization": self._api_key}

    async def get_rooms(self) -> Tuple[List[TuoLifeRoom], str | None]:
        """Fetch and normalize all rooms of the account."""
        if self._session is None:
            return [], "Client session not initialized"
        try:
            async with self._session.get(API_ROOMS, headers=self._headers(), timeout=self._timeout) as resp:
                if resp.status != 200:
                    _LOGGER.error("Failed to fetch devices from server: HTTP %s", resp.status)
                    return [], f"HTTP {resp.status}"
                data = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as ex:
            _LOGGER.error("Failed to fetch devices from server: %s", ex)
            return [], f"Exception: {ex}"

        if not isinstance(data, list):
            _LOGGER.error("Unexpected API response format, expected array of rooms: %s", data)
            return [], "Unexpected response format"

        rooms: List[TuoLifeRoom] = []
        try:
            for entry in data:
                if not isinstance(entry, dict):
                    _LOGGER.warning("Skipping malformed room entry: %r", entry)
                    continue
                rooms.append(map_room(entry))
        except (TypeError, ValueError, AttributeError, OverflowError) as ex:
            _LOGGER.error("Could not parse room list: %s", ex)
            return [], f"Malformed room list: {ex}"
        return rooms, None

    async def get_devices(self) -> Tuple[List[TuoLifeDevice], str | None]:
        """All devices across rooms; empty list together with an error on failure."""
        rooms, err = await self.get_rooms()
        if err:
            return [], err
        devices = devices_from_rooms(rooms)
        _LOGGER.debug("Fetched %s devices in %s rooms", len(devices), len(rooms))
        return devices, None

    async def start_room_mode(self, device: TuoLifeDevice) -> Tuple[bool, str | None]:
        """Send a device snapshot upstream. The response body is ignored."""
        if self._session is None:
            return False, "Client session not initialized"
        payload = device.to_mode_payload()
        _LOGGER.debug("roomModeStart → %s payload=%s", device.bulb_id, payload)
        try:
            async with self._session.post(
                API_ROOM_MODE_START, headers=self._headers(), json=payload, timeout=self._timeout
            ) as resp:
                if resp.status >= 400:
                    return False, f"HTTP {resp.status}"
        except (aiohttp.ClientError, asyncio.TimeoutError) as ex:
            return False, f"Exception: {ex}"
        return True, None

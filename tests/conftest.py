"""Shared fixtures and fakes for TuoLife tests."""

from typing import Any, Dict, List, Optional

import pytest

from custom_components.tuolife.models import AccessoryRecord, TuoLifeDevice


class FakeHost:
    """Records host calls and rejects double registration like a real host."""

    def __init__(self) -> None:
        self.created: List[AccessoryRecord] = []
        self.registered: Dict[str, AccessoryRecord] = {}
        self.register_calls: List[List[AccessoryRecord]] = []
        self.unregistered: List[AccessoryRecord] = []

    def create_accessory(self, name: str, uuid: str) -> AccessoryRecord:
        record = AccessoryRecord(uuid, name)
        self.created.append(record)
        return record

    def register_accessories(self, records: List[AccessoryRecord]) -> None:
        for record in records:
            assert record.uuid not in self.registered, f"duplicate registration of {record.uuid}"
            self.registered[record.uuid] = record
        self.register_calls.append(list(records))

    def unregister_accessories(self, records: List[AccessoryRecord]) -> None:
        for record in records:
            self.registered.pop(record.uuid, None)
        self.unregistered.extend(records)


class FakeResponse:
    """Async context manager standing in for aiohttp.ClientResponse."""

    def __init__(self, status: int = 200, payload: Any = None, json_error: Optional[Exception] = None) -> None:
        self.status = status
        self._payload = payload
        self._json_error = json_error

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._payload

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False


class FakeSession:
    """Minimal aiohttp.ClientSession replacement recording requests."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse(payload=[])
        self.error = error
        self.closed = False
        self.requests: List[Dict[str, Any]] = []

    def _request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._request("POST", url, **kwargs)

    async def close(self) -> None:
        self.closed = True


def make_device(bulb_id: str = "bulb-1", **overrides: Any) -> TuoLifeDevice:
    """Canonical device with realistic defaults."""
    values: Dict[str, Any] = {
        "bulb_id": bulb_id,
        "group_id": "group-1",
        "nickname": f"Lamp {bulb_id}",
        "mode_id": "calm5",
        "brightness": 50,
        "violet": 100,
        "is_available": True,
    }
    values.update(overrides)
    return TuoLifeDevice(**values)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def rooms_payload() -> List[Dict[str, Any]]:
    """Two rooms as returned by /group/roomsByUser."""
    return [
        {
            "id": "room-1",
            "groupName": "Living room",
            "brightness": "80",
            "modeId": "calm5",
            "devices": [
                {
                    "bulb_ID": "A1",
                    "groupId": "room-1",
                    "nickname": "Couch",
                    "modeId": "calm5",
                    "generation": 2,
                    "userId": "user-1",
                    "deviceId": "dev-a1",
                    "firmwareVersion": "1.0.4",
                    "isAvailable": True,
                    "brightness": 80,
                    "red": 10,
                    "green": 20,
                    "blue": 30,
                    "violet": 100,
                    "whiteColor": 40,
                },
                {"bulb_ID": "A2", "groupId": "room-1", "nickname": "Shelf", "modeId": "off"},
            ],
        },
        {
            "id": "room-2",
            "groupName": "Bedroom",
            "devices": [{"bulb_ID": "B1", "groupId": "room-2", "nickname": "Bedside", "brightness": "35"}],
        },
    ]

"""Unit tests for the TuoLife cloud client.

Covers payload normalization, the roomsByUser fetch and roomModeStart sends.
"""

import asyncio
import logging

import aiohttp
import pytest

from conftest import FakeResponse, FakeSession, make_device
from custom_components.tuolife.api import TuoLifeClient, devices_from_rooms, map_device, map_room
from custom_components.tuolife.const import API_ROOM_MODE_START, API_ROOMS


def _errors(caplog):
    return [r for r in caplog.records if r.levelno == logging.ERROR and r.name.startswith("custom_components.tuolife")]


class TestNormalization:
    """Tests for raw payload mapping"""

    def test_map_device_full_payload(self, rooms_payload):
        device = map_device(rooms_payload[0]["devices"][0])

        assert device.bulb_id == "A1"
        assert device.group_id == "room-1"
        assert device.nickname == "Couch"
        assert device.mode_id == "calm5"
        assert device.generation == "2"
        assert device.user_id == "user-1"
        assert device.device_id == "dev-a1"
        assert device.firmware_version == "1.0.4"
        assert device.is_available is True
        assert device.brightness == 80
        assert (device.red, device.green, device.blue, device.violet, device.white_color) == (10, 20, 30, 100, 40)

    def test_map_device_defaults(self):
        device = map_device({"bulb_ID": "X"})

        assert device.mode_id == "off"
        assert device.brightness == 0
        assert device.red == device.green == device.blue == device.violet == device.white_color == 0
        assert device.is_available is False
        assert device.group_id == ""
        assert device.user_id == ""
        assert device.firmware_version == ""
        assert device.generation == "1"

    def test_map_device_coerces_string_numbers(self):
        device = map_device({"bulb_ID": "X", "brightness": "35", "red": "not-a-number"})

        assert device.brightness == 35
        assert device.red == 0

    @pytest.mark.parametrize("value", ["inf", "-inf", "nan", float("inf"), "1e400"])
    def test_map_device_non_finite_brightness(self, value):
        assert map_device({"bulb_ID": "X", "brightness": value}).brightness == 0

    @pytest.mark.parametrize(
        "value, expected",
        [(True, True), (False, False), ("true", True), ("True", True), ("1", True), (1, True),
         ("false", False), ("0", False), ("", False), (None, False), (0, False)],
    )
    def test_map_device_availability(self, value, expected):
        assert map_device({"bulb_ID": "X", "isAvailable": value}).is_available is expected

    def test_room_skips_non_object_devices_with_warning(self, caplog):
        caplog.set_level(logging.WARNING)

        room = map_room({"id": "r", "devices": ["junk", {"bulb_ID": "Z"}, None]})

        assert [d.bulb_id for d in room.devices] == ["Z"]
        assert len([r for r in caplog.records if "malformed device entry" in r.getMessage()]) == 2

    def test_map_device_missing_bulb_id_warns(self, caplog):
        caplog.set_level(logging.WARNING)

        device = map_device({"nickname": "Mystery"})

        assert device.bulb_id == ""
        assert any("missing bulb_ID" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)

    def test_numeric_bulb_id_becomes_string(self):
        assert map_device({"bulb_ID": 1234}).bulb_id == "1234"

    def test_room_without_device_list(self):
        assert map_room({"id": "r"}).devices == []
        assert map_room({"id": "r", "devices": "nope"}).devices == []

    def test_devices_from_rooms_flattens_in_order(self, rooms_payload):
        rooms = [map_room(r) for r in rooms_payload]

        assert [d.bulb_id for d in devices_from_rooms(rooms)] == ["A1", "A2", "B1"]


class TestGetDevices:
    """Tests for TuoLifeClient.get_devices"""

    @pytest.mark.asyncio
    async def test_success_flattens_rooms(self, rooms_payload):
        session = FakeSession(FakeResponse(payload=rooms_payload))
        client = TuoLifeClient("secret", session=session)

        devices, err = await client.get_devices()

        assert err is None
        assert [d.bulb_id for d in devices] == ["A1", "A2", "B1"]
        assert devices[2].brightness == 35
        request = session.requests[0]
        assert request["method"] == "GET"
        assert request["url"] == API_ROOMS
        assert request["headers"] == {"Authorization": "secret"}

    @pytest.mark.asyncio
    async def test_object_response_returns_empty_and_logs_one_error(self, caplog):
        caplog.set_level(logging.DEBUG)
        session = FakeSession(FakeResponse(payload={"message": "Unauthorized"}))
        client = TuoLifeClient("secret", session=session)

        devices, err = await client.get_devices()

        assert devices == []
        assert err is not None
        assert len(_errors(caplog)) == 1

    @pytest.mark.asyncio
    async def test_room_missing_devices_contributes_nothing(self):
        payload = [{"id": "empty"}, {"id": "r", "devices": [{"bulb_ID": "Z"}]}]
        client = TuoLifeClient("secret", session=FakeSession(FakeResponse(payload=payload)))

        devices, err = await client.get_devices()

        assert err is None
        assert [d.bulb_id for d in devices] == ["Z"]

    @pytest.mark.asyncio
    async def test_non_finite_brightness_does_not_raise(self):
        payload = [{"id": "r", "devices": [{"bulb_ID": "Z", "brightness": "inf", "modeId": "calm5"}]}]
        client = TuoLifeClient("secret", session=FakeSession(FakeResponse(payload=payload)))

        devices, err = await client.get_devices()

        assert err is None
        assert devices[0].brightness == 0

    @pytest.mark.asyncio
    async def test_non_object_room_is_skipped_with_warning(self, caplog):
        caplog.set_level(logging.WARNING)
        payload = ["junk", {"id": "r", "devices": [{"bulb_ID": "Z"}]}]
        client = TuoLifeClient("secret", session=FakeSession(FakeResponse(payload=payload)))

        devices, err = await client.get_devices()

        assert err is None
        assert [d.bulb_id for d in devices] == ["Z"]
        assert any("malformed room entry" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_normalization_failure_is_returned_as_error(self, monkeypatch, caplog):
        caplog.set_level(logging.ERROR)

        def _broken(raw):
            raise ValueError("bad room")

        monkeypatch.setattr("custom_components.tuolife.api.map_room", _broken)
        payload = [{"id": "r", "devices": [{"bulb_ID": "Z"}]}]
        client = TuoLifeClient("secret", session=FakeSession(FakeResponse(payload=payload)))

        devices, err = await client.get_devices()

        assert devices == []
        assert "bad room" in err
        assert len(_errors(caplog)) == 1

    @pytest.mark.asyncio
    async def test_empty_account_is_not_an_error(self):
        client = TuoLifeClient("secret", session=FakeSession(FakeResponse(payload=[])))

        devices, err = await client.get_devices()

        assert devices == []
        assert err is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "session",
        [
            FakeSession(error=aiohttp.ClientConnectionError("boom")),
            FakeSession(error=asyncio.TimeoutError()),
            FakeSession(FakeResponse(json_error=ValueError("not json"))),
            FakeSession(FakeResponse(status=500, payload=[])),
        ],
    )
    async def test_failures_never_raise(self, session):
        client = TuoLifeClient("secret", session=session)

        devices, err = await client.get_devices()

        assert devices == []
        assert err

    @pytest.mark.asyncio
    async def test_without_session(self):
        devices, err = await TuoLifeClient("secret").get_devices()

        assert devices == []
        assert err == "Client session not initialized"


class TestStartRoomMode:
    """Tests for TuoLifeClient.start_room_mode"""

    @pytest.mark.asyncio
    async def test_posts_mode_payload(self):
        session = FakeSession(FakeResponse(status=200))
        client = TuoLifeClient("secret", session=session)
        device = make_device(mode_id="off", brightness=5, red=1, green=2, blue=3, violet=4, white_color=6)

        ok, err = await client.start_room_mode(device)

        assert (ok, err) == (True, None)
        request = session.requests[0]
        assert request["method"] == "POST"
        assert request["url"] == API_ROOM_MODE_START
        assert request["headers"] == {"Authorization": "secret"}
        assert request["json"] == {
            "groupId": "group-1",
            "modeId": "off",
            "brightness": 5,
            "red": 1,
            "green": 2,
            "blue": 3,
            "violet": 4,
            "whiteColor": 6,
        }

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = TuoLifeClient("secret", session=FakeSession(FakeResponse(status=401)))

        ok, err = await client.start_room_mode(make_device())

        assert ok is False
        assert err == "HTTP 401"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = TuoLifeClient("secret", session=FakeSession(error=aiohttp.ClientConnectionError("down")))

        ok, err = await client.start_room_mode(make_device())

        assert ok is False
        assert "down" in err


class TestSession:
    """Tests for session lifecycle"""

    @pytest.mark.asyncio
    async def test_close_session(self):
        session = FakeSession()
        client = TuoLifeClient("secret", session=session)

        await client.close()

        assert session.closed is True

    def test_has_api_key(self):
        assert TuoLifeClient("secret").has_api_key is True
        assert TuoLifeClient("").has_api_key is False

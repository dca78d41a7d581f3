"""Models for TuoLife integration."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .const import MODE_OFF


@dataclass
class TuoLifeDevice:
    bulb_id: str
    group_id: str = ""
    user_id: str = ""
    device_id: str = ""
    firmware_version: str = ""
    nickname: str = ""
    generation: str = "1"
    mode_id: str = MODE_OFF
    brightness: int = 0
    red: int = 0
    green: int = 0
    blue: int = 0
    violet: int = 0
    white_color: int = 0
    is_available: bool = False

    @property
    def is_on(self) -> bool:
        return self.mode_id != MODE_OFF

    def update_state(self, other: "TuoLifeDevice", *, include_power: bool = True) -> None:
        """Copy reported state from a fresh fetch into this object.

        Identity and display name are left alone. With include_power=False the
        mode and brightness are kept (a recent local change is still pending).
        """
        if include_power:
            self.brightness = int(other.brightness)
            self.mode_id = other.mode_id
        self.group_id = other.group_id
        self.user_id = other.user_id
        self.device_id = other.device_id
        self.firmware_version = other.firmware_version
        self.generation = other.generation
        self.red = other.red
        self.green = other.green
        self.blue = other.blue
        self.violet = other.violet
        self.white_color = other.white_color
        self.is_available = other.is_available

    def to_mode_payload(self) -> Dict[str, Any]:
        """Body of a roomModeStart request."""
        return {
            "groupId": self.group_id,
            "modeId": self.mode_id,
            "brightness": self.brightness,
            "red": self.red,
            "green": self.green,
            "blue": self.blue,
            "violet": self.violet,
            "whiteColor": self.white_color,
        }


@dataclass
class TuoLifeRoom:
    room_id: str = ""
    name: str = ""
    devices: List[TuoLifeDevice] = field(default_factory=list)


@dataclass
class AccessoryContext:
    device: Optional[TuoLifeDevice] = None


@dataclass(frozen=True)
class ProjectedState:
    on: bool
    brightness: int


class AccessoryRecord:
    """Host-side accessory for one bulb.

    The record is kept for as long as the bulb exists in the account and is
    only ever mutated, never replaced, so listeners attached by entities stay
    valid across polls.
    """

    def __init__(self, uuid: str, display_name: str, context: AccessoryContext | None = None):
        self._uuid = uuid
        self._display_name = display_name
        self.context = context or AccessoryContext()
        # Monotonic seconds of the last local (user) change, 0.0 if none
        self.last_changed: float = 0.0
        # Brightness the bulb last had while on, restored when it is turned back on
        self.last_on_brightness: int | None = None
        self.characteristics: Dict[str, Any] = {}
        self._listeners: List[Callable[[], None]] = []

    @property
    def uuid(self) -> str:
        return self._uuid

    @property
    def display_name(self) -> str:
        return self._display_name

    def remember_on_brightness(self) -> None:
        device = self.context.device
        if device is not None and device.is_on and device.brightness > 0:
            self.last_on_brightness = int(device.brightness)

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a state listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def update_characteristics(self, **values: Any) -> None:
        """Store characteristic values and notify listeners.

        This never calls back into set handlers.
        """
        self.characteristics.update(values)
        for listener in list(self._listeners):
            listener()

    def __repr__(self) -> str:
        return f"AccessoryRecord(uuid={self._uuid!r}, name={self._display_name!r})"

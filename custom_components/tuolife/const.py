"""Constants for the TuoLife integration."""

DOMAIN = "tuolife"
MANUFACTURER = "TuoLife"

CONF_API_KEY = "api_key"
CONF_SCAN_INTERVAL = "scan_interval"
# Seconds during which a local change wins over polled state
CONF_LOCAL_HOLD = "local_hold"

DEFAULT_SCAN_INTERVAL = 5
DEFAULT_LOCAL_HOLD = 10

API_BASE = "https://mobileapi.thetuolife.com"
API_ROOMS = f"{API_BASE}/group/roomsByUser"
API_ROOM_MODE_START = f"{API_BASE}/mode/roomModeStart"
API_TIMEOUT = 15

# Cloud modes. "off" is the only powered-off mode.
MODE_OFF = "off"
MODE_ON = "calm5"
MODE_ACTIVE = "active5"
KNOWN_MODES = [MODE_OFF, MODE_ON, MODE_ACTIVE]

# Brightness sent with "off"; some firmware rejects a zero floor
OFF_BRIGHTNESS = 5

SIGNAL_ACCESSORIES_ADDED = f"{DOMAIN}_accessories_added"
SIGNAL_ACCESSORY_REMOVED = f"{DOMAIN}_accessory_removed_{{}}"

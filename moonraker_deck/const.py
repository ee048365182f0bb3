ACTION_UUID = "com.jcarletto.moonraker-monitor.action"

# Property inspector settings keys
CONF_BASE_URL = "baseUrl"
CONF_PORT = "port"
CONF_API_KEY = "apiKey"
CONF_POLLING_INTERVAL = "pollingInterval"
CONF_DISPLAY_BED_TEMP = "displayBedTemp"
CONF_DISPLAY_HOTEND_TEMP = "displayHotendTemp"
CONF_DISPLAY_PRINT_STATUS = "displayPrintStatus"
CONF_DISPLAY_PRINT_PROGRESS = "displayPrintProgress"
CONF_DISPLAY_LAYER_INFO = "displayLayerInfo"

# Moonraker HTTP
QUERY_PATH = "/printer/objects/query"
QUERY_OBJECTS = ("print_stats", "heater_bed", "extruder", "display_status", "virtual_sdcard")
API_KEY_HEADER = "X-Api-Key"
REQUEST_TIMEOUT_SEC = 10

# Stream Deck websocket
HOST_WS_URL = "ws://127.0.0.1:{port}"
HEARTBEAT_SEC = 10
RECONNECT_BACKOFF = [1, 2, 5, 10, 20, 30]

# Print states that carry progress/layer information
ACTIVE_STATES = ("printing", "paused")

# Icons, relative to the plugin root; anything unmapped reverts to the manifest icon
ICON_DIR = "imgs/actions/moonraker"

# Key titles for non-status presentations
TITLE_SETTINGS_REQUIRED = "Settings\nRequired"
TITLE_SETTINGS_INVALID = "Settings\nInvalid"
TITLE_HOST_DOWN = "Host\nDown?"
TITLE_PARSE_ERROR = "Parse\nErr"
TITLE_FETCH_ERROR = "Fetch\nError"
TITLE_NO_DATA = "No Data"

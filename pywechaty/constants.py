"""
Constants for the pywechaty library.
"""

# Environment variables
TOKEN_ENV_VAR = "WECHATY_TOKEN"
ENDPOINT_ENV_VAR = "WECHATY_ENDPOINT"
TIMEOUT_ENV_VAR = "WECHATY_TIMEOUT"
LOG_ENV_VAR = "WECHATY_LOG"

# Puppet service discovery
ENDPOINT_SERVICE_URL = "https://api.chatie.io/v0/hosties/{token}"
ENDPOINT_SERVICE_TIMEOUT = 10  # seconds

# Login QR code viewer used by the examples
QRCODE_VIEWER_URL = "https://wechaty.js.org/qrcode/{qrcode}"

# Request parameters
DEFAULT_TIMEOUT = 30          # seconds per RPC
CONNECT_TIMEOUT_MS = 30000    # connection timeout
KEEPALIVE_INTERVAL_MS = 20000 # keepalive interval

# Reconnect settings, exponential backoff with jitter
MAX_RECONNECT_ATTEMPTS = 10
RECONNECT_DELAY_MS = 1000
MAX_RECONNECT_DELAY_MS = 60000
RECONNECT_DECAY_FACTOR = 1.5
RECONNECT_RANDOM_FACTOR = 0.2

# Payload cache capacities
CACHE_CONTACT_SIZE = 3000
CACHE_FRIENDSHIP_SIZE = 300
CACHE_MESSAGE_SIZE = 500
CACHE_ROOM_SIZE = 500
CACHE_ROOM_MEMBER_SIZE = 30000
CACHE_ROOM_INVITATION_SIZE = 100

# Maximum number of concurrent payload fetches in batch loads
BATCH_CONCURRENCY = 16

# Separator of the room member cache key
ROOM_MEMBER_KEY_SEPARATOR = "@@@"

# Message text shown by str(message)
MESSAGE_TEXT_PREVIEW = 70


class ConnectionState:
    """Constants for the puppet service connection state"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTING = "disconnecting"


class FileBoxType:
    """Constants for the source of a FileBox"""
    UNKNOWN = 0
    BASE64 = 1
    URL = 2
    QRCODE = 3
    BUFFER = 4
    FILE = 5

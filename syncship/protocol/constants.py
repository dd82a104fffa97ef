"""
SyncShip Protocol - Constants

Fixed values of the wire protocol. Both sides must agree on every value here.
"""

PROTOCOL_VERSION = "idh14sync/1.0"
MESSAGE_ENCODING = "utf-8"
CONTENT_HASH_ALGORITHM = "sha1"

DEFAULT_PORT = 8733
BUFFER_SIZE = 8192

# Socket read timeout (seconds); a stalled peer fails the exchange after this long
DEFAULT_READ_TIMEOUT = 30.0
# Idle timeout (seconds) that ends a message under brace-counting framing
DEFAULT_IDLE_TIMEOUT = 1.0
DEFAULT_CONNECT_TIMEOUT = 10.0

# Upper bound for a single length-prefixed message (512 MiB)
MAX_MESSAGE_SIZE = 512 * 1024 * 1024

HEADER_SEPARATOR = "\r\n\r\n"

# Request verbs
VERB_LIST = "LIST"
VERB_GET = "GET"
VERB_PUT = "PUT"
VERB_DELETE = "DELETE"

# Response verb
VERB_RESPONSE = "RESPONSE"

# Framing names accepted in configuration
FRAMING_LENGTH = "length"
FRAMING_BRACE = "brace"

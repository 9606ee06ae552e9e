"""Record protocol constants shared by the encoder, decoder and connection."""

RESERVED = 0
HEADER_LEN = 12

# control byte
CTRL_PARSE_TEMPLATE = 10
CTRL_STATUS_OK = 0
CTRL_STATUS_KO = 1

# content-format bytes
CONTENT_JSON = 10
CONTENT_PATH = 20
CONTENT_TEXT = 30
CONTENT_BIN = 40

MAX_CONTENT_LENGTH = 0xFFFFFFFF

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4273
DEFAULT_TIMEOUT = 10.0
DEFAULT_BUFFER_SIZE = 8192
DEFAULT_CONFIG_FILE = "/etc/neutral-ipc-cfg.json"

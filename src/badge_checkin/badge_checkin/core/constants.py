"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_SEARCH_LIMIT = 10

# Questions the UserData fragment asks the service for.
QUESTION_NAMES = (
    "major",
    "school",
    "tshirt-size",
    "dietary-restrictions",
    "optional-items",
)

# Type 2 tag TLV blocks
TLV_NULL = 0x00
TLV_LOCK_CONTROL = 0x01
TLV_MEMORY_CONTROL = 0x02
TLV_NDEF_MESSAGE = 0x03
TLV_PROPRIETARY = 0xFD
TLV_TERMINATOR = 0xFE
TLV_TYPES = frozenset(
    {TLV_NULL, TLV_LOCK_CONTROL, TLV_MEMORY_CONTROL, TLV_NDEF_MESSAGE, TLV_PROPRIETARY, TLV_TERMINATOR}
)

# NDEF record header flags
NDEF_MB = 0x80
NDEF_ME = 0x40
NDEF_CF = 0x20
NDEF_SR = 0x10
NDEF_IL = 0x08
NDEF_TNF_MASK = 0x07
TNF_WELL_KNOWN = 0x01

# Query parameter that carries the user id on printed badges.
BADGE_USER_PARAM = "user"

# URI identifier codes (NFC Forum URI RTD, table 3).
URI_PREFIXES = {
    0x00: "",
    0x01: "http://www.",
    0x02: "https://www.",
    0x03: "http://",
    0x04: "https://",
    0x05: "tel:",
    0x06: "mailto:",
    0x07: "ftp://anonymous:anonymous@",
    0x08: "ftp://ftp.",
    0x09: "ftps://",
    0x0A: "sftp://",
    0x0B: "smb://",
    0x0C: "nfs://",
    0x0D: "ftp://",
    0x0E: "dav://",
    0x0F: "news:",
    0x10: "telnet://",
    0x11: "imap:",
    0x12: "rtsp://",
    0x13: "urn:",
    0x14: "pop:",
    0x15: "sip:",
    0x16: "sips:",
    0x17: "tftp:",
    0x18: "btspp://",
    0x19: "btl2cap://",
    0x1A: "btgoep://",
    0x1B: "tcpobex://",
    0x1C: "irdaobex://",
    0x1D: "file://",
    0x1E: "urn:epc:id:",
    0x1F: "urn:epc:tag:",
    0x20: "urn:epc:pat:",
    0x21: "urn:epc:raw:",
    0x22: "urn:epc:",
    0x23: "urn:nfc:",
}

"""Badge memory -> user identifier.

Badges are NTAG21x stickers holding a single well-known NDEF record, either a
Text record with the bare id or a URI record such as
``https://live.hack.gt?user=<id>``. Tag memory read from user page 4 onward
starts with Type 2 TLV blocks; buffers that start with the record header are
accepted as well.
"""

from __future__ import annotations

from typing import Iterable, Union
from urllib.parse import parse_qs, urlsplit

from ..core.constants import (
    BADGE_USER_PARAM,
    NDEF_CF,
    NDEF_IL,
    NDEF_MB,
    NDEF_ME,
    NDEF_SR,
    NDEF_TNF_MASK,
    TLV_NDEF_MESSAGE,
    TLV_NULL,
    TLV_TERMINATOR,
    TLV_TYPES,
    TNF_WELL_KNOWN,
    URI_PREFIXES,
)
from ..core.enums import WellKnownType
from ..core.exceptions import MalformedTag
from .model import BadgeIdentifier, TagRecord

RawBytes = Union[bytes, bytearray, memoryview, Iterable[int]]


def decode(raw_bytes: RawBytes) -> BadgeIdentifier:
    record = parse_record(unwrap_message(_as_bytes(raw_bytes)))
    if record.record_type == WellKnownType.TEXT:
        identifier = _text_of(record.payload)
    else:
        prefix, rest = _uri_parts(record.payload)
        identifier = _identifier_from_uri(prefix, rest)
    return BadgeIdentifier(identifier)


def unwrap_message(buffer: bytes) -> bytes:
    """Return the NDEF message bytes, stripping the TLV wrapper if present."""
    if not buffer:
        raise MalformedTag("Buffer is empty")
    if buffer[0] not in TLV_TYPES:
        return buffer

    i = 0
    while i < len(buffer):
        tlv_type = buffer[i]
        if tlv_type == TLV_NULL:
            i += 1
            continue
        if tlv_type == TLV_TERMINATOR:
            break
        if i + 1 >= len(buffer):
            raise MalformedTag("TLV block is truncated")

        length = buffer[i + 1]
        start = i + 2
        if length == 0xFF:
            if i + 3 >= len(buffer):
                raise MalformedTag("TLV block is truncated")
            length = int.from_bytes(buffer[i + 2:i + 4], "big")
            start = i + 4

        end = start + length
        if end > len(buffer):
            raise MalformedTag(f"TLV declares {length} bytes but only {len(buffer) - start} were read")
        if tlv_type == TLV_NDEF_MESSAGE:
            return buffer[start:end]
        i = end

    raise MalformedTag("No NDEF message on tag")


def parse_record(message: bytes) -> TagRecord:
    if len(message) < 3:
        raise MalformedTag("Buffer too short for an NDEF record header")

    header = message[0]
    if header & NDEF_TNF_MASK != TNF_WELL_KNOWN:
        raise MalformedTag("Only NFC well-known records are supported")
    if not header & NDEF_MB or not header & NDEF_ME:
        raise MalformedTag("Badge must hold exactly one NDEF record")
    if header & NDEF_CF:
        raise MalformedTag("Chunked records are not supported")

    type_length = message[1]
    pos = 2
    if header & NDEF_SR:
        payload_length = message[pos]
        pos += 1
    else:
        if pos + 4 > len(message):
            raise MalformedTag("Buffer too short for an NDEF record header")
        payload_length = int.from_bytes(message[pos:pos + 4], "big")
        pos += 4

    id_length = 0
    if header & NDEF_IL:
        if pos >= len(message):
            raise MalformedTag("Buffer too short for an NDEF record header")
        id_length = message[pos]
        pos += 1

    end = pos + type_length + id_length + payload_length
    if end > len(message):
        raise MalformedTag(f"Record declares {end} bytes but buffer holds {len(message)}")

    try:
        record_type = WellKnownType(message[pos:pos + type_length].decode("ascii"))
    except (UnicodeDecodeError, ValueError):
        raise MalformedTag("Record type is neither Text nor URI") from None

    # The declared length is a floor: writers in the field undercount the URI
    # prefix byte, so the payload runs on to the terminator.
    payload_start = pos + type_length + id_length
    payload_end = message.find(bytes([TLV_TERMINATOR]), end)
    if payload_end < 0:
        payload_end = len(message)
    payload = bytes(message[payload_start:end]) + bytes(message[end:payload_end]).rstrip(b"\x00")
    return TagRecord(record_type=record_type, payload=payload)


def _as_bytes(raw_bytes: RawBytes) -> bytes:
    try:
        return bytes(raw_bytes)
    except (TypeError, ValueError) as exc:
        raise MalformedTag(f"Not a byte buffer: {exc}") from exc


def _text_of(payload: bytes) -> str:
    if not payload:
        raise MalformedTag("Text record has no status byte")
    status = payload[0]
    lang_length = status & 0x3F
    if 1 + lang_length > len(payload):
        raise MalformedTag("Text record language code overruns the payload")
    text = payload[1 + lang_length:]
    if not status & 0x80:
        encoding = "utf-8"
    elif text[:2] in (b"\xff\xfe", b"\xfe\xff"):
        encoding = "utf-16"
    else:
        # No byte order mark: the Text RTD says big-endian.
        encoding = "utf-16-be"
    try:
        return text.decode(encoding)
    except UnicodeDecodeError as exc:
        raise MalformedTag(f"Text record is not valid {encoding}") from exc


def _uri_parts(payload: bytes) -> tuple[str, str]:
    if not payload:
        raise MalformedTag("URI record has no identifier code")
    try:
        rest = payload[1:].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedTag("URI record is not valid UTF-8") from exc
    return URI_PREFIXES.get(payload[0], ""), rest


def _identifier_from_uri(prefix: str, rest: str) -> str:
    parts = urlsplit(prefix + rest)
    users = parse_qs(parts.query, keep_blank_values=True).get(BADGE_USER_PARAM)
    if users is not None:
        return users[0]
    segments = [s for s in parts.path.split("/") if s]
    if parts.netloc and segments:
        return segments[-1]
    return rest

"""
SyncShip Protocol - Message Codec

Builds and parses protocol messages:

    <VERB> <protocol-version>\r\n\r\n<json-body>

The JSON body is optional (LIST requests carry none). Binary content and file names
travel base64-encoded so the body stays valid UTF-8 and never contains raw braces
from file data.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from syncship.protocol.constants import (
    PROTOCOL_VERSION, MESSAGE_ENCODING, HEADER_SEPARATOR, VERB_RESPONSE
)
from syncship.protocol.exceptions import SyncShipProtocolError, raise_for_status
from syncship.protocol.models import ErrorResponseBody
from syncship.protocol.status_codes import SyncStatusCode

logger = logging.getLogger(__name__)

BodyModel = TypeVar("BodyModel", bound=BaseModel)


@dataclass
class Message:
    """A decoded message: upper-cased verb, protocol version and raw JSON body text"""
    verb: str
    version: str
    body: Optional[str]


# ==================== Base64 Helpers ====================

def encode_content(content: bytes) -> str:
    """Encode raw bytes as a base64 string"""
    return base64.b64encode(content).decode('ascii')


def decode_content(value: str) -> bytes:
    """
    Decode a base64 string to raw bytes.

    Raises:
        ValueError: If the value is not valid base64
    """
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 data: {e}") from e


def encode_name(name: str) -> str:
    """Encode a file name as base64 over its UTF-8 bytes"""
    return encode_content(name.encode(MESSAGE_ENCODING))


def decode_name(value: str) -> str:
    """
    Decode a base64 file name.

    Raises:
        ValueError: If the value is not valid base64 or not valid UTF-8
    """
    raw = decode_content(value)
    try:
        return raw.decode(MESSAGE_ENCODING)
    except UnicodeDecodeError as e:
        raise ValueError(f"File name is not valid {MESSAGE_ENCODING}: {e}") from e


# ==================== Message Encoding ====================

def encode_message(verb: str, body: Optional[BaseModel] = None) -> bytes:
    """
    Encode a message as header line, blank line and JSON body.

    Args:
        verb: Request verb or RESPONSE
        body: Optional Pydantic body model

    Returns:
        Encoded message bytes (one write, never chunked)
    """
    body_json = body.model_dump_json() if body is not None else ""
    message = f"{verb} {PROTOCOL_VERSION}{HEADER_SEPARATOR}{body_json}"
    return message.encode(MESSAGE_ENCODING)


def encode_response(body: BaseModel) -> bytes:
    """Encode a response message"""
    return encode_message(VERB_RESPONSE, body)


# ==================== Message Decoding ====================

def decode_message(data: bytes) -> Message:
    """
    Decode message bytes and verify the header.

    Args:
        data: Complete message bytes as delivered by the framing

    Returns:
        Message with upper-cased verb and the body text (None when absent)

    Raises:
        SyncShipProtocolError: If the text is not UTF-8, the header is malformed,
                               or the protocol version does not match
    """
    try:
        text = data.decode(MESSAGE_ENCODING)
    except UnicodeDecodeError as e:
        raise SyncShipProtocolError(f"Message is not valid {MESSAGE_ENCODING}") from e

    parts = text.split(HEADER_SEPARATOR, 1)
    header_parts = parts[0].strip().split(' ')

    if len(header_parts) < 2 or not header_parts[0]:
        raise SyncShipProtocolError(f"Malformed message header: {parts[0][:80]!r}")

    verb = header_parts[0].upper()
    version = header_parts[1]

    if version.casefold() != PROTOCOL_VERSION.casefold():
        raise SyncShipProtocolError(f"Unsupported protocol version: {version}")

    body = parts[1] if len(parts) > 1 else None
    if body is not None and not body.strip():
        body = None

    return Message(verb=verb, version=version, body=body)


def parse_body(body: Optional[str], model: Type[BodyModel]) -> BodyModel:
    """
    Parse a JSON body into a Pydantic model.

    Raises:
        SyncShipProtocolError: If the body is missing or does not match the model
    """
    if body is None:
        raise SyncShipProtocolError("Missing message body")

    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise SyncShipProtocolError(f"Failed to parse the message body: {e.error_count()} error(s)") from e


def parse_response(data: bytes, model: Type[BodyModel]) -> BodyModel:
    """
    Decode a response message and return its body as the requested model.

    Process:
    1. Verify header is RESPONSE with the expected protocol version
    2. Parse the status (and message) from the body
    3. Raise the status-specific exception for non-Ok responses
    4. Parse the full body as the requested model

    Raises:
        SyncShipProtocolError: If the message is malformed
        SyncShipError: Status-specific subclass for non-Ok responses
    """
    message = decode_message(data)

    if message.verb != VERB_RESPONSE:
        raise SyncShipProtocolError(f"Expected {VERB_RESPONSE} message, got {message.verb}")

    status_body = parse_body(message.body, ErrorResponseBody)
    if status_body.status != SyncStatusCode.OK:
        logger.debug(f"Server answered {int(status_body.status)}: {status_body.message}")
        raise_for_status(status_body.status, status_body.message)

    return parse_body(message.body, model)

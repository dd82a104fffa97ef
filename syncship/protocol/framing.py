"""
SyncShip Protocol - Message Framing

Determines where one message ends on a stream socket. Two framings are available:

- LengthPrefixedFraming (default): 8-byte big-endian length, then the message bytes.
  The receiver knows the message size up front.
- BraceCountingFraming: compatibility with peers that send no length. The receiver
  counts curly braces in the decoded text and stops when they balance, falling back
  to the idle read timeout (or EOF) for messages without a JSON body.

Both framings send a message with a single write.
"""

import codecs
import logging
import socket
import struct
from abc import ABC, abstractmethod

from syncship.protocol.constants import (
    BUFFER_SIZE, MAX_MESSAGE_SIZE, MESSAGE_ENCODING, DEFAULT_IDLE_TIMEOUT,
    FRAMING_LENGTH, FRAMING_BRACE
)
from syncship.protocol.exceptions import SyncShipTransportError, SyncShipProtocolError

logger = logging.getLogger(__name__)

LENGTH_PREFIX = struct.Struct(">Q")


class Framing(ABC):
    """Interface shared by the framings"""

    name = ""

    @abstractmethod
    def write_message(self, sock: socket.socket, data: bytes) -> None:
        """Send one complete message with a single write"""

    @abstractmethod
    def read_message(self, sock: socket.socket) -> bytes:
        """Receive one complete message"""


class LengthPrefixedFraming(Framing):
    """Length-prefixed framing: [length:8][message]"""

    name = FRAMING_LENGTH

    def __init__(self, max_message_size: int = MAX_MESSAGE_SIZE):
        self.max_message_size = max_message_size

    def write_message(self, sock: socket.socket, data: bytes) -> None:
        try:
            sock.sendall(LENGTH_PREFIX.pack(len(data)) + data)
        except OSError as e:
            raise SyncShipTransportError(f"Failed to send message: {e}") from e

    def read_message(self, sock: socket.socket) -> bytes:
        header = self._read_exact(sock, LENGTH_PREFIX.size)
        (length,) = LENGTH_PREFIX.unpack(header)

        if length > self.max_message_size:
            raise SyncShipProtocolError(
                f"Message of {length} bytes exceeds the limit of {self.max_message_size} bytes"
            )

        return self._read_exact(sock, length)

    @staticmethod
    def _read_exact(sock: socket.socket, size: int) -> bytes:
        """Read exactly size bytes or fail"""
        chunks = []
        remaining = size

        while remaining > 0:
            try:
                chunk = sock.recv(min(BUFFER_SIZE, remaining))
            except socket.timeout as e:
                raise SyncShipTransportError(
                    f"Timed out after {size - remaining}/{size} bytes"
                ) from e
            except OSError as e:
                raise SyncShipTransportError(f"Socket error while reading: {e}") from e

            if not chunk:
                raise SyncShipTransportError(
                    f"Connection closed after {size - remaining}/{size} bytes"
                )

            chunks.append(chunk)
            remaining -= len(chunk)

        return b"".join(chunks)


class BraceCountingFraming(Framing):
    """
    Brace-counting framing without a length field

    The body is complete once at least one opening brace was seen and the opening
    and closing brace counts are equal. Silence for idle_timeout seconds or EOF
    ends the message;
    any other socket error aborts the exchange. Payloads with unbalanced braces in
    string values can end early or late, which is why names and content are base64.
    """

    name = FRAMING_BRACE

    def __init__(self, idle_timeout: float = DEFAULT_IDLE_TIMEOUT):
        self.idle_timeout = idle_timeout

    def write_message(self, sock: socket.socket, data: bytes) -> None:
        try:
            sock.sendall(data)
        except OSError as e:
            raise SyncShipTransportError(f"Failed to send message: {e}") from e

    def read_message(self, sock: socket.socket) -> bytes:
        decoder = codecs.getincrementaldecoder(MESSAGE_ENCODING)(errors='strict')
        received = bytearray()

        previous_timeout = sock.gettimeout()
        sock.settimeout(self.idle_timeout)
        try:
            self._read_until_balanced(sock, decoder, received)
        finally:
            sock.settimeout(previous_timeout)

        if not received:
            raise SyncShipTransportError("Connection closed before any data was received")

        return bytes(received)

    @staticmethod
    def _read_until_balanced(sock: socket.socket, decoder, received: bytearray) -> None:
        open_count = 0
        close_count = 0

        while True:
            try:
                chunk = sock.recv(BUFFER_SIZE)
            except socket.timeout:
                # No more data coming
                logger.debug(f"Read timeout after {len(received)} bytes, treating message as complete")
                break
            except OSError as e:
                raise SyncShipTransportError(f"Socket error while reading: {e}") from e

            if not chunk:
                break

            received.extend(chunk)

            try:
                text = decoder.decode(chunk)
            except UnicodeDecodeError as e:
                raise SyncShipProtocolError(f"Message is not valid {MESSAGE_ENCODING}") from e

            open_count += text.count('{')
            close_count += text.count('}')

            if open_count > 0 and open_count == close_count:
                break


def get_framing(name: str, idle_timeout: float = DEFAULT_IDLE_TIMEOUT) -> Framing:
    """
    Get a framing instance by configuration name.

    Args:
        name: "length" or "brace" (empty selects "length")
        idle_timeout: Silence that ends a message under brace-counting framing (seconds)

    Raises:
        ValueError: If the name is unknown
    """
    normalized = (name or FRAMING_LENGTH).strip().lower()
    if normalized == FRAMING_LENGTH:
        return LengthPrefixedFraming()
    if normalized == FRAMING_BRACE:
        return BraceCountingFraming(idle_timeout)
    raise ValueError(f"Unknown framing: {name}. Must be one of: {FRAMING_LENGTH}, {FRAMING_BRACE}")

"""
SyncShip Client - Sync Protocol Client

Handles all communication with the SyncShip server. Each call opens a fresh TCP
connection, performs one request/response exchange and closes the connection,
whether the exchange succeeded or not.

Author: SyncShip Project
"""

import logging
import socket
from typing import List, Optional

from syncship.protocol.checksum import calculate_checksum
from syncship.protocol.codec import (
    encode_message, parse_response,
    encode_name, decode_name, encode_content, decode_content
)
from syncship.protocol.constants import (
    DEFAULT_PORT, DEFAULT_READ_TIMEOUT, DEFAULT_CONNECT_TIMEOUT,
    VERB_LIST, VERB_GET, VERB_PUT, VERB_DELETE
)
from syncship.protocol.exceptions import SyncShipTransportError, SyncShipProtocolError
from syncship.protocol.framing import Framing, LengthPrefixedFraming
from syncship.protocol.models import (
    FileRecord, SyncedFile,
    GetRequestBody, PutRequestBody, DeleteRequestBody,
    ListResponseBody, GetResponseBody, PutResponseBody, DeleteResponseBody
)

# Configure logging
logger = logging.getLogger(__name__)


class SyncClient:
    """
    Client for the SyncShip sync protocol.

    Responsibilities:
    - List files on the server
    - Download, add, update and delete files
    - Map response statuses to exceptions
    """

    def __init__(self, host: str, port: int = DEFAULT_PORT, framing: Optional[Framing] = None,
                 read_timeout: float = DEFAULT_READ_TIMEOUT,
                 connect_timeout: float = DEFAULT_CONNECT_TIMEOUT):
        """
        Initialize sync client.

        Args:
            host: Server host name or IP address
            port: Server port
            framing: Message framing, must match the server (length-prefixed by default)
            read_timeout: Socket read timeout while waiting for the response (seconds)
            connect_timeout: Timeout for establishing the connection (seconds)
        """
        self.host = host
        self.port = port
        self.framing = framing or LengthPrefixedFraming()
        self.read_timeout = read_timeout
        self.connect_timeout = connect_timeout
        logger.debug(f"Initialized sync client for {self.host}:{self.port} ({self.framing.name} framing)")

    def list_files(self) -> List[FileRecord]:
        """
        Get the names and checksums of all files on the server.

        Returns:
            List of FileRecord

        Raises:
            SyncShipError: If the request fails
        """
        response = self._execute_request(encode_message(VERB_LIST), ListResponseBody)

        files = []
        for entry in response.files:
            try:
                files.append(FileRecord(decode_name(entry.name), entry.checksum))
            except ValueError as e:
                raise SyncShipProtocolError(f"Server sent an invalid file name: {e}") from e

        logger.debug(f"Server lists {len(files)} files")
        return files

    def get_file(self, name: str) -> SyncedFile:
        """
        Download a file from the server.

        Args:
            name: File name

        Returns:
            SyncedFile with decoded content

        Raises:
            ValueError: If name is empty
            SyncShipError: If the request fails
        """
        if not name:
            raise ValueError("The file name cannot be empty.")

        request = GetRequestBody(name=encode_name(name))
        response = self._execute_request(encode_message(VERB_GET, request), GetResponseBody)

        try:
            content = decode_content(response.content)
        except ValueError as e:
            raise SyncShipProtocolError(f"Server sent invalid content for {name}: {e}") from e

        logger.debug(f"Downloaded {name} ({len(content)} bytes)")
        return SyncedFile(name=name, checksum=response.checksum, content=content)

    def add_file(self, name: str, content: bytes) -> SyncedFile:
        """
        Add a new file to the server.

        The server rejects the request with a conflict if the file already exists.
        """
        return self._put_file(name, "", content)

    def update_file(self, name: str, original_checksum: str, content: bytes) -> SyncedFile:
        """
        Replace an existing file on the server.

        Args:
            name: File name
            original_checksum: Checksum the server's copy must still have
            content: New file content

        Raises:
            ValueError: If original_checksum is empty
            SyncShipConflictError: If the server's copy changed since original_checksum
        """
        if not original_checksum:
            raise ValueError("The original checksum cannot be empty.")

        return self._put_file(name, original_checksum, content)

    def _put_file(self, name: str, original_checksum: str, content: bytes) -> SyncedFile:
        """Add or update a file on the server"""
        if not name:
            raise ValueError("The file name cannot be empty.")
        if content is None:
            raise ValueError("The content cannot be None.")

        checksum = calculate_checksum(content)

        request = PutRequestBody(
            name=encode_name(name),
            checksum=checksum,
            original_checksum=original_checksum,
            content=encode_content(content)
        )
        response = self._execute_request(encode_message(VERB_PUT, request), PutResponseBody)

        # Verify server stored the bytes we sent
        if response.checksum and response.checksum != checksum:
            logger.error(f"Checksum mismatch for {name}: sent {checksum}, server stored {response.checksum}")
            raise SyncShipProtocolError(f"Checksum verification failed for {name}")

        return SyncedFile(name=name, checksum=checksum, content=content)

    def delete_file(self, name: str, checksum: str) -> None:
        """
        Delete a file from the server.

        Args:
            name: File name
            checksum: Checksum the server's copy must have

        Raises:
            ValueError: If name or checksum is empty
            SyncShipError: If the request fails
        """
        if not name:
            raise ValueError("The file name cannot be empty.")
        if not checksum:
            raise ValueError("The checksum cannot be empty.")

        request = DeleteRequestBody(name=encode_name(name), checksum=checksum)
        self._execute_request(encode_message(VERB_DELETE, request), DeleteResponseBody)

    def _execute_request(self, request_bytes: bytes, response_model):
        """
        Send a request over a new connection and parse the response.

        Args:
            request_bytes: Encoded request message
            response_model: Pydantic model expected for an Ok response

        Returns:
            Parsed response body

        Raises:
            SyncShipTransportError: If the connection or exchange fails
            SyncShipProtocolError: If the response is malformed
            SyncShipError: Status-specific subclass for non-Ok responses
        """
        try:
            connection = socket.create_connection((self.host, self.port), timeout=self.connect_timeout)
        except OSError as e:
            logger.error(f"Cannot connect to server at {self.host}:{self.port}: {e}")
            raise SyncShipTransportError(f"Cannot connect to server at {self.host}:{self.port}") from e

        try:
            connection.settimeout(self.read_timeout)
            self.framing.write_message(connection, request_bytes)
            response_bytes = self.framing.read_message(connection)
        finally:
            # Always close the connection, even when an error occurred
            connection.close()

        return parse_response(response_bytes, response_model)

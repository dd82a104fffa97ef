"""
SyncShip Server - TCP Listener and Request Dispatcher

Accepts connections on a listening socket and services each one on its own thread.
Every connection carries exactly one request/response exchange:

1. Read the request message through the configured framing
2. Decode the header and verify the protocol version
3. Validate the body and dispatch to the request handler for the verb
4. Write the response message and close the connection

Faults while servicing a request become InternalServerError responses; they never
reach the listener thread.
"""

import logging
import socket
import threading
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from syncship.protocol.checksum import calculate_checksum
from syncship.protocol.codec import (
    decode_message, encode_response, parse_body,
    encode_name, decode_name, encode_content, decode_content
)
from syncship.protocol.constants import (
    DEFAULT_PORT, DEFAULT_READ_TIMEOUT,
    VERB_LIST, VERB_GET, VERB_PUT, VERB_DELETE
)
from syncship.protocol.exceptions import SyncShipProtocolError, SyncShipTransportError
from syncship.protocol.framing import Framing, LengthPrefixedFraming
from syncship.protocol.models import (
    SyncedFile, SyncOutcome,
    GetRequestBody, PutRequestBody, DeleteRequestBody,
    ErrorResponseBody, ListFileEntry, ListResponseBody,
    GetResponseBody, PutResponseBody, DeleteResponseBody
)
from syncship.protocol.status_codes import SyncStatusCode
from syncship.server.handlers import SyncRequestHandler

logger = logging.getLogger(__name__)

# How often the accept loop wakes up to check for a stop request (seconds)
ACCEPT_POLL_INTERVAL = 0.5
LISTEN_BACKLOG = 10


class ServerStatus(Enum):
    """Lifecycle states of the listener"""
    STOPPED = "stopped"
    STARTING = "starting"
    STARTED = "started"
    STOPPING = "stopping"


class SyncServer:
    """
    Listener for the sync protocol

    Responsibilities:
    - Bind and accept connections until stopped
    - Service each connection on its own thread
    - Decode, validate and dispatch requests to the injected handler
    - Convert handler outcomes into response messages
    """

    def __init__(self, handler: SyncRequestHandler, host: str = "0.0.0.0", port: int = DEFAULT_PORT,
                 framing: Optional[Framing] = None, read_timeout: float = DEFAULT_READ_TIMEOUT):
        """
        Initialize the server

        Args:
            handler: Implementation of the four request operations
            host: Interface to bind
            port: Port to listen on (0 selects a free port)
            framing: Message framing (length-prefixed by default)
            read_timeout: Socket read timeout for connections (seconds)
        """
        self.handler = handler
        self.host = host
        self.port = port
        self.framing = framing or LengthPrefixedFraming()
        self.read_timeout = read_timeout

        self._status = ServerStatus.STOPPED
        self._status_lock = threading.Lock()
        self._listener: Optional[socket.socket] = None
        self._listener_thread: Optional[threading.Thread] = None
        self._can_listen = False
        self._bound_port: Optional[int] = None

    @property
    def Status(self) -> ServerStatus:
        return self._status

    @property
    def Port(self) -> int:
        """Port actually bound (differs from the configured port when 0 was requested)"""
        return self._bound_port or self.port

    # ==================== Lifecycle ====================

    def Start(self) -> None:
        """
        Bind the listening socket and start the accept loop

        Does nothing unless the server is stopped. A Stop() issued while the socket
        is being bound wins: the socket is closed and the server stays stopped.

        Raises:
            OSError: If the socket cannot be bound
        """
        with self._status_lock:
            if self._status != ServerStatus.STOPPED:
                logger.warning(f"Start ignored: server is {self._status.value}")
                return
            self._status = ServerStatus.STARTING
            self._can_listen = True

        try:
            listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((self.host, self.port))
            listener.listen(LISTEN_BACKLOG)
            listener.settimeout(ACCEPT_POLL_INTERVAL)
        except OSError as e:
            logger.error(f"Could not start server on {self.host}:{self.port}: {e}")
            with self._status_lock:
                self._can_listen = False
                self._status = ServerStatus.STOPPED
            raise

        with self._status_lock:
            if self._status != ServerStatus.STARTING:
                logger.info("Server stopped while starting")
                listener.close()
                self._can_listen = False
                self._status = ServerStatus.STOPPED
                return

            self._listener = listener
            self._bound_port = listener.getsockname()[1]
            self._listener_thread = threading.Thread(target=self._Listen, name="syncship-listener", daemon=True)
            self._listener_thread.start()

    def Stop(self) -> None:
        """
        Stop accepting connections

        Closes the listening socket; the accept loop finishes the transition to
        STOPPED. In-flight connection handlers are not waited for.
        """
        with self._status_lock:
            if self._status not in (ServerStatus.STARTING, ServerStatus.STARTED):
                return
            self._status = ServerStatus.STOPPING
            self._can_listen = False
            listener = self._listener

        logger.info("Stopping server")
        if listener is not None:
            try:
                listener.close()
            except OSError as e:
                logger.debug(f"Error closing listener: {e}")

    def WaitUntilStopped(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the accept loop has exited

        Returns:
            True if the loop exited within the timeout
        """
        if self._listener_thread is None:
            return True
        self._listener_thread.join(timeout)
        return not self._listener_thread.is_alive()

    def _Listen(self) -> None:
        """Accept loop, run on the listener thread"""
        with self._status_lock:
            if self._status == ServerStatus.STARTING:
                self._status = ServerStatus.STARTED
        logger.info(f"Server is listening on {self.host}:{self.Port} ({self.framing.name} framing)")

        try:
            while self._can_listen:
                try:
                    client_socket, client_address = self._listener.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if not self._can_listen:
                        # Listener closed by Stop()
                        break
                    logger.error(f"Fatal error accepting connections: {e}")
                    break

                request_thread = threading.Thread(
                    target=self._HandleConnection,
                    args=(client_socket, client_address),
                    daemon=True
                )
                request_thread.start()
        finally:
            try:
                self._listener.close()
            except OSError:
                pass
            with self._status_lock:
                self._can_listen = False
                self._listener = None
                self._status = ServerStatus.STOPPED
            logger.info("Server stopped")

    # ==================== Connection Handling ====================

    def _HandleConnection(self, client_socket: socket.socket, client_address) -> None:
        """Service one request/response exchange and close the connection"""
        logger.debug(f"[{client_address}] Connected")

        try:
            client_socket.settimeout(self.read_timeout)

            try:
                request_bytes = self.framing.read_message(client_socket)
            except SyncShipTransportError as e:
                logger.warning(f"[{client_address}] Failed to read request: {e}")
                return
            except SyncShipProtocolError as e:
                logger.warning(f"[{client_address}] Unreadable request: {e}")
                self._SendResponse(client_socket, ErrorResponseBody(
                    status=SyncStatusCode.BAD_REQUEST, message=str(e)))
                return

            response_body = self.ProcessRequest(request_bytes, client_address)
            self._SendResponse(client_socket, response_body)

        except SyncShipTransportError as e:
            logger.warning(f"[{client_address}] Failed to send response: {e}")
        except Exception as e:
            logger.exception(f"[{client_address}] Unexpected error handling connection: {e}")
        finally:
            try:
                client_socket.close()
            except OSError:
                pass
            logger.debug(f"[{client_address}] Connection closed")

    def _SendResponse(self, client_socket: socket.socket, response_body: BaseModel) -> None:
        self.framing.write_message(client_socket, encode_response(response_body))

    def ProcessRequest(self, request_bytes: bytes, client_address=None) -> BaseModel:
        """
        Decode a request message and produce the response body

        Any exception raised while servicing the request becomes an
        InternalServerError response.

        Args:
            request_bytes: Complete request message
            client_address: Peer address for logging

        Returns:
            Response body model
        """
        try:
            message = decode_message(request_bytes)
        except SyncShipProtocolError as e:
            logger.warning(f"[{client_address}] Bad request: {e}")
            return ErrorResponseBody(status=SyncStatusCode.BAD_REQUEST, message=str(e))

        logger.info(f"[{client_address}] {message.verb} request")

        try:
            if message.verb == VERB_LIST:
                return self._ProcessList()
            elif message.verb == VERB_GET:
                return self._ProcessGet(message.body)
            elif message.verb == VERB_PUT:
                return self._ProcessPut(message.body)
            elif message.verb == VERB_DELETE:
                return self._ProcessDelete(message.body)
            else:
                logger.warning(f"[{client_address}] Unknown verb: {message.verb}")
                return ErrorResponseBody(
                    status=SyncStatusCode.BAD_REQUEST,
                    message=f"Unknown verb: {message.verb}"
                )
        except Exception as e:
            logger.exception(f"[{client_address}] Error servicing {message.verb} request: {e}")
            return ErrorResponseBody(
                status=SyncStatusCode.INTERNAL_SERVER_ERROR,
                message="The server failed to process the request."
            )

    # ==================== Verb Processing ====================

    @staticmethod
    def _ErrorBody(outcome: SyncOutcome) -> ErrorResponseBody:
        return ErrorResponseBody(status=outcome.status, message=outcome.message)

    @staticmethod
    def _BadRequest(message: str) -> ErrorResponseBody:
        return ErrorResponseBody(status=SyncStatusCode.BAD_REQUEST, message=message)

    def _ParseRequestBody(self, body: Optional[str], model):
        """Parse a request body, returning (model, None) or (None, error body)"""
        if body is None:
            return None, self._BadRequest("Missing request body.")
        try:
            return parse_body(body, model), None
        except SyncShipProtocolError:
            return None, self._BadRequest("Malformed request body.")

    def _DecodeName(self, encoded_name: Optional[str]):
        """Decode a base64 name, returning (name, None) or (None, error body)"""
        if not encoded_name:
            return None, self._BadRequest("No file name specified.")
        try:
            return decode_name(encoded_name), None
        except ValueError:
            return None, self._BadRequest("File name is not valid base64.")

    def _ProcessList(self) -> BaseModel:
        outcome, files = self.handler.HandleList()
        if not outcome.is_ok or files is None:
            return self._ErrorBody(outcome)

        return ListResponseBody(
            status=outcome.status,
            files=[ListFileEntry(name=encode_name(f.name), checksum=f.checksum) for f in files]
        )

    def _ProcessGet(self, body: Optional[str]) -> BaseModel:
        request, error = self._ParseRequestBody(body, GetRequestBody)
        if error:
            return error

        name, error = self._DecodeName(request.name)
        if error:
            return error

        outcome, file = self.handler.HandleGet(name)
        if not outcome.is_ok or file is None:
            return self._ErrorBody(outcome)

        return GetResponseBody(
            status=outcome.status,
            name=encode_name(file.name),
            checksum=file.checksum,
            content=encode_content(file.content)
        )

    def _ProcessPut(self, body: Optional[str]) -> BaseModel:
        request, error = self._ParseRequestBody(body, PutRequestBody)
        if error:
            return error

        name, error = self._DecodeName(request.name)
        if error:
            return error

        if request.content is None:
            return self._BadRequest("No file content specified.")
        try:
            content = decode_content(request.content)
        except ValueError:
            return self._BadRequest("File content is not valid base64.")

        checksum = calculate_checksum(content)
        if request.checksum and request.checksum != checksum:
            return self._BadRequest("The checksum does not match the file content.")

        outcome = self.handler.HandlePut(
            request.original_checksum or "",
            SyncedFile(name=name, checksum=checksum, content=content)
        )
        if not outcome.is_ok:
            return self._ErrorBody(outcome)

        return PutResponseBody(status=outcome.status, checksum=outcome.checksum or checksum)

    def _ProcessDelete(self, body: Optional[str]) -> BaseModel:
        request, error = self._ParseRequestBody(body, DeleteRequestBody)
        if error:
            return error

        name, error = self._DecodeName(request.name)
        if error:
            return error

        if not request.checksum:
            return self._BadRequest("No checksum specified.")

        outcome = self.handler.HandleDelete(name, request.checksum)
        if not outcome.is_ok:
            return self._ErrorBody(outcome)

        return DeleteResponseBody(status=outcome.status)

"""HTTP transport for communicating with the soundboard API."""

import math
import os
import re
import uuid
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from common.constants import RATE_LIMIT_ERROR_CODE, UPLOAD_CONTENT_TYPES
from common.logging_config import get_logger
from client.config import Config
from client.exceptions import NetworkError, RateLimitedError, TransportError
from client.schemas.common import ErrorResponse

logger = get_logger(__name__)

ProgressCallback = Callable[[int], None]

_LEADING_NUMBER = re.compile(r"\s*\d+(?:\.\d+)?")


class ProgressFileReader:
    """File-like reader that reports upload progress in whole percent."""

    CHUNK_SIZE = 8192

    def __init__(self, file_path: Path, on_progress: ProgressCallback):
        """
        Initialize the progress reader.

        Args:
            file_path: Path of the file being uploaded
            on_progress: Called with the new percentage each time it changes
        """
        self.file_path = file_path
        self.on_progress = on_progress
        self._file = open(file_path, 'rb')
        self.total = os.fstat(self._file.fileno()).st_size
        self._sent = 0
        self._last_reported: Optional[int] = None

    def read(self, size: int = -1) -> bytes:
        """
        Read bytes from the file and report progress.

        Args:
            size: Number of bytes to read (-1 or 0 for default chunk size)

        Returns:
            Bytes read from the file
        """
        chunk = self._file.read(size if size and size > 0 else self.CHUNK_SIZE)
        if chunk:
            self._sent += len(chunk)
            self._report(int(self._sent * 100 / self.total + 0.5))
        else:
            self._report(100)
        return chunk

    def _report(self, percent: int) -> None:
        percent = min(percent, 100)
        if percent != self._last_reported:
            self._last_reported = percent
            self.on_progress(percent)

    def seek(self, offset: int, whence: int = 0) -> int:
        position = self._file.seek(offset, whence)
        self._sent = position
        return position

    def tell(self) -> int:
        return self._file.tell()

    def fileno(self) -> int:
        return self._file.fileno()

    def close(self) -> None:
        """Close the underlying file."""
        if self._file:
            self._file.close()

    def __enter__(self) -> 'ProgressFileReader':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class Transport:
    """Async HTTP transport with cookie session and typed error classification.

    No request is ever retried here; retry policy belongs to the caller.
    """

    def __init__(self, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize transport.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (used by tests to mock the server)
        """
        self.config = config
        cookies = {}
        if config.get_session_cookie():
            cookies[config.get_cookie_name()] = config.get_session_cookie()
        self.session = httpx.AsyncClient(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            cookies=cookies,
            transport=transport,
        )
        logger.info(f"Initialized Transport [base_url={config.get_base_url()}]")

    def url_for(self, endpoint: str) -> str:
        """Absolute URL for endpoints consumed outside the transport (redirects, streams)."""
        return f"{self.config.get_base_url()}{endpoint}"

    def set_session_cookie(self, value: Optional[str]) -> None:
        """
        Replace the session cookie sent with every request.

        Args:
            value: Cookie value, or None to drop the session
        """
        name = self.config.get_cookie_name()
        self.session.cookies.delete(name)
        if value:
            self.session.cookies.set(name, value)
        self.config.set_session_cookie(value)

    async def request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        Make an HTTP request and decode its JSON body.

        Args:
            method: HTTP method (GET, POST, PATCH, PUT, DELETE)
            endpoint: API endpoint path
            **kwargs: Additional arguments passed to httpx (params, json, ...)

        Returns:
            Decoded JSON body (empty dict for empty bodies)

        Raises:
            TransportError: Server rejected the request with a structured error
            NetworkError: Connectivity failure or unusable response body
        """
        response = await self._send(method, endpoint, **kwargs)
        if not response.is_success:
            self._raise_for_error(method, endpoint, response, with_retry_after=False)
        return self._decode(method, endpoint, response)

    async def submit_with_progress(
        self,
        endpoint: str,
        file_path: Path,
        fields: dict[str, str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Any:
        """
        Post a multipart form with the file under the ``audio`` field.

        When ``on_progress`` is given the file is streamed through a
        ProgressFileReader so the callback receives whole-percent updates up
        to and including 100.

        Args:
            endpoint: API endpoint path
            file_path: File to upload
            fields: Extra form fields
            on_progress: Optional progress callback

        Returns:
            Decoded JSON body

        Raises:
            RateLimitedError: Upload refused by the server cooldown
            TransportError: Server rejected the upload
            NetworkError: Connectivity failure or unusable response body
        """
        file_path = Path(file_path)
        content_type = UPLOAD_CONTENT_TYPES.get(file_path.suffix.lower(), 'application/octet-stream')

        if on_progress is None:
            with open(file_path, 'rb') as f:
                files = {'audio': (file_path.name, f, content_type)}
                response = await self._send('POST', endpoint, files=files, data=fields)
        else:
            with ProgressFileReader(file_path, on_progress) as reader:
                files = {'audio': (file_path.name, reader, content_type)}
                response = await self._send('POST', endpoint, files=files, data=fields)

        if not response.is_success:
            self._raise_for_error('POST', endpoint, response, with_retry_after=True)
        return self._decode('POST', endpoint, response)

    async def _send(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        request_id = str(uuid.uuid4())
        headers = kwargs.pop('headers', None) or {}
        headers['X-Request-ID'] = request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={request_id}]")
        try:
            response = await self.session.request(method, endpoint, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Request timed out: {method} {endpoint} error={e} [request_id={request_id}]")
            raise NetworkError("Request timed out. Server may be overloaded.") from e
        except httpx.TransportError as e:
            logger.error(f"Network error: {method} {endpoint} error={e} [request_id={request_id}]")
            raise NetworkError("Network error: cannot reach the soundboard server.") from e

        logger.debug(
            f"Response received: {method} {endpoint} status={response.status_code} [request_id={request_id}]"
        )
        return response

    def _raise_for_error(
        self,
        method: str,
        endpoint: str,
        response: httpx.Response,
        with_retry_after: bool,
    ) -> None:
        """
        Classify a non-success response into a typed exception.

        Args:
            method: HTTP method, for logging
            endpoint: API endpoint path, for logging
            response: The failed response
            with_retry_after: Whether a retry delay may be read (upload endpoint only)
        """
        try:
            payload = ErrorResponse.model_validate(response.json())
        except ValueError:
            logger.warning(f"Unstructured error: {method} {endpoint} status={response.status_code}")
            raise NetworkError(
                f"API Error: {response.status_code} {response.reason_phrase}".strip(),
                status=response.status_code,
            )

        error = payload.error
        retry_after = None
        if with_retry_after:
            retry_after = _whole_seconds(error.retry_after)
            if retry_after is None:
                retry_after = _parse_retry_after(response.headers.get('Retry-After'))

        logger.warning(
            f"Client error: {method} {endpoint} status={response.status_code} code={error.code}"
        )
        exc_class = RateLimitedError if error.code == RATE_LIMIT_ERROR_CODE else TransportError
        raise exc_class(error.code, error.message, response.status_code, retry_after)

    def _decode(self, method: str, endpoint: str, response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.error(f"Invalid JSON body: {method} {endpoint} status={response.status_code}")
            raise NetworkError("Invalid response from server", status=response.status_code)

    async def close(self) -> None:
        """Close the HTTP session."""
        await self.session.aclose()


def _whole_seconds(value: Optional[float]) -> Optional[int]:
    """Round a delay up to whole seconds so a cooldown never ends early."""
    if value is None or value < 0 or math.isinf(value) or math.isnan(value):
        return None
    return math.ceil(value)


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    match = _LEADING_NUMBER.match(value)
    if match is None:
        return None
    return _whole_seconds(float(match.group(0)))

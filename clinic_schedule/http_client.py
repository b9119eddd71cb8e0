"""HTTP client for the clinic backend.

Purpose: One place for base URL, bearer token, timeouts, retry policy and
error translation, so services only deal with paths and JSON.

Pattern: requests.Session with connection pooling and a tenacity retry
policy. Retries are opt-in (max_retries defaults to 0, a single attempt);
callers own the retry decision.
"""
import logging
import time
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from clinic_schedule import config
from clinic_schedule.errors import ApiError, ResponseShapeError, UnauthorizedError
from clinic_schedule.logging_config import get_logger

logger = get_logger(__name__)
retry_logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)
IDEMPOTENT_METHODS = ("GET", "PUT", "DELETE")


def create_http_session(
    token: Optional[str] = None,
    pool_size: int = 10,
) -> requests.Session:
    """
    Create HTTP session with connection pooling and JSON headers.

    Args:
        token: Bearer token sent on every request (optional)
        pool_size: Connections kept per host; should cover the number of
                   concurrent quick-create workers

    Returns:
        Configured requests.Session
    """
    session = requests.Session()
    session.headers.update({
        "Content-Type": "application/json",
        "Accept": "application/json",
    })
    if token:
        session.headers["Authorization"] = f"Bearer {token}"

    adapter = HTTPAdapter(
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def error_message(response: requests.Response) -> Optional[str]:
    """Backend error message from a JSON body ("message" or "error"), if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None


class ApiClient:
    """Thin JSON client bound to one backend base URL."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_factor: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Backend root, e.g. http://localhost:8000/api/v1
            token: Bearer token (defaults to CLINIC_API_TOKEN)
            timeout: Request timeout in seconds (default: 30)
            max_retries: Extra attempts for connection errors, timeouts and
                         429/5xx on idempotent methods (default: 0)
            backoff_factor: Exponential backoff multiplier; delays are
                            factor * 1s, 2s, 4s... capped at 8s
            session: Pre-built session (tests, custom transport adapters)
        """
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.API_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else config.API_MAX_RETRIES
        self.backoff_factor = backoff_factor
        token = token if token is not None else config.API_TOKEN
        if session is None:
            session = create_http_session(token=token)
        elif token:
            session.headers["Authorization"] = f"Bearer {token}"
        self.session = session

    def set_token(self, token: Optional[str]):
        """Replace (or with None, drop) the bearer token."""
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        else:
            self.session.headers.pop("Authorization", None)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if response.status_code in RETRY_STATUSES:
            raise requests.exceptions.HTTPError(
                f"{response.status_code} from {url}", response=response
            )
        return response

    def _retrying(self, method: str) -> Retrying:
        # POST is not idempotent: a retried create could duplicate a record
        attempts = self.max_retries + 1 if method in IDEMPOTENT_METHODS else 1
        return Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(
                multiplier=self.backoff_factor, min=self.backoff_factor, max=8
            ),
            retry=retry_if_exception_type((
                requests.exceptions.ConnectionError,
                requests.exceptions.Timeout,
                requests.exceptions.HTTPError
            )),
            before_sleep=before_sleep_log(retry_logger, logging.WARNING),
            reraise=True
        )

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            path: Path relative to the base URL
            params: Query string parameters (None values are dropped)
            json: JSON body

        Returns:
            Decoded JSON, or None for an empty body

        Raises:
            UnauthorizedError: On HTTP 401
            ApiError: On any other transport or HTTP failure
            ResponseShapeError: If a non-empty body is not JSON
        """
        method = method.upper()
        url = self._url(path)
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        start_time = time.time()
        try:
            response = self._retrying(method)(
                self._send, method, url, params=params, json=json
            )
        except requests.exceptions.HTTPError as e:
            response = e.response
            if response is None:
                raise ApiError(str(e)) from e
        except requests.exceptions.RequestException as e:
            logger.warning("request_failed", method=method, path=path, error=str(e))
            raise ApiError(config.GENERIC_ERROR_MESSAGE) from e

        logger.debug(
            "request",
            method=method,
            path=path,
            status=response.status_code,
            duration=round(time.time() - start_time, 4),
        )
        return self._handle(method, path, response)

    def _handle(self, method: str, path: str, response: requests.Response) -> Any:
        status = response.status_code
        if status == 401:
            raise UnauthorizedError(error_message(response), status_code=status)
        if status >= 400:
            message = error_message(response)
            logger.warning("request_rejected", method=method, path=path, status=status, message=message)
            raise ApiError(message, status_code=status)

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ResponseShapeError(f"{method} {path} returned a non-JSON body") from e

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

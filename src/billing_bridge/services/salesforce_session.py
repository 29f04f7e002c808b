"""Salesforce session management.

Owns the single remote session shared by all requests. Login and queries go
through simple-salesforce; its blocking calls run in worker threads so the
event loop is never held up.
"""

import asyncio
import logging
from typing import Any, Callable
from urllib.parse import urlsplit

import requests
from simple_salesforce import Salesforce, SalesforceLogin
from simple_salesforce import exceptions as sf_exceptions

from billing_bridge.config import Settings

logger = logging.getLogger(__name__)


class SalesforceError(Exception):
    """Base exception for Salesforce errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class SalesforceAuthError(SalesforceError):
    """Login failed or no session could be established."""


class SalesforceQueryError(SalesforceError):
    """The query endpoint rejected a request."""


def login_domain(login_url: str) -> str:
    """Map a login URL to the domain simple-salesforce expects.

    https://login.salesforce.com -> "login", https://acme.my.salesforce.com
    -> "acme.my".
    """
    host = urlsplit(login_url).netloc or login_url
    return host.removesuffix(".salesforce.com")


def _api_error(error: sf_exceptions.SalesforceError) -> tuple[str, str]:
    """errorCode and message from a REST error raised by simple-salesforce."""
    content = getattr(error, "content", None)
    if isinstance(content, list) and content and isinstance(content[0], dict):
        content = content[0]
    if isinstance(content, dict):
        return (
            str(content.get("errorCode", "HTTP_ERROR")),
            str(content.get("message", f"HTTP {getattr(error, 'status', '')}".strip())),
        )
    return "HTTP_ERROR", str(content or error)


class SalesforceSession:
    """Lazily-established, process-wide Salesforce session.

    connect() is single-flight: callers that arrive while a login is in
    progress share its outcome, success or failure. A caller arriving after
    a failed login starts a new attempt.
    """

    def __init__(
        self,
        settings: Settings,
        http_session: requests.Session | None = None,
    ) -> None:
        self.settings = settings
        self._http = http_session
        self._owns_http = http_session is None
        self._lock = asyncio.Lock()
        self._attempts = 0
        self._last_error: SalesforceAuthError | None = None
        self._session_id: str | None = None
        self._instance: str | None = None
        self._client: Salesforce | None = None

    @property
    def is_connected(self) -> bool:
        return self._session_id is not None

    def _get_http(self) -> requests.Session:
        if self._http is None:
            self._http = requests.Session()
            self._owns_http = True
        return self._http

    async def _call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a blocking simple-salesforce call in a thread, with a timeout."""
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, **kwargs),
            timeout=self.settings.SALESFORCE_TIMEOUT_SECONDS,
        )

    async def connect(self) -> None:
        """Log in unless a session already exists.

        Raises:
            SalesforceAuthError: If the login fails
        """
        if self.is_connected:
            return

        # The lock holder numbers its attempt before its first await
        joined = self._attempts if self._lock.locked() else None
        async with self._lock:
            if self.is_connected:
                return
            if joined == self._attempts and self._last_error is not None:
                raise self._last_error

            self._attempts += 1
            try:
                session_id, instance = await self._login()
            except SalesforceAuthError as e:
                self._last_error = e
                logger.error(f"Salesforce connection error: {e.message}")
                raise

            self._last_error = None
            self._session_id = session_id
            self._instance = instance
            self._client = Salesforce(
                instance=instance,
                session_id=session_id,
                version=self.settings.SALESFORCE_API_VERSION,
                session=self._get_http(),
            )
            logger.info(f"Connected to Salesforce at https://{instance}")

    async def _login(self) -> tuple[str, str]:
        """Perform the login and return (session_id, instance host)."""
        try:
            return await self._call(
                SalesforceLogin,
                username=self.settings.SALESFORCE_USERNAME,
                password=self.settings.SALESFORCE_PASSWORD,
                security_token=self.settings.SALESFORCE_SECURITY_TOKEN,
                domain=login_domain(self.settings.SALESFORCE_LOGIN_URL),
                sf_version=self.settings.SALESFORCE_API_VERSION,
                session=self._get_http(),
            )
        except sf_exceptions.SalesforceAuthenticationFailed as e:
            detail = f"{e.code}: {e.message}" if e.code else str(e.message)
            raise SalesforceAuthError(e.code or "LOGIN_FAILED", f"Failed to connect to Salesforce: {detail}") from e
        except requests.RequestException as e:
            raise SalesforceAuthError("CONNECTION_FAILED", f"Failed to connect to Salesforce: {e}") from e
        except asyncio.TimeoutError as e:
            raise SalesforceAuthError("CONNECTION_FAILED", "Failed to connect to Salesforce: login timed out") from e

    async def query(self, soql: str) -> dict[str, Any]:
        """Run a SOQL query and return the raw response body.

        Raises:
            SalesforceQueryError: If the query is rejected or cannot be sent
            SalesforceAuthError: If called before connect()
        """
        if self._client is None or not self.is_connected:
            raise SalesforceAuthError("NOT_CONNECTED", "Not connected to Salesforce")

        try:
            return await self._call(self._client.query, soql)
        except sf_exceptions.SalesforceExpiredSession as e:
            # Force a fresh login on the next call
            self._session_id = None
            _, message = _api_error(e)
            raise SalesforceQueryError("INVALID_SESSION_ID", message) from e
        except sf_exceptions.SalesforceError as e:
            code, message = _api_error(e)
            raise SalesforceQueryError(code, message) from e
        except requests.RequestException as e:
            raise SalesforceQueryError("CONNECTION_FAILED", str(e) or type(e).__name__) from e
        except asyncio.TimeoutError as e:
            raise SalesforceQueryError("TIMEOUT", "Salesforce query timed out") from e

    async def disconnect(self) -> None:
        """Revoke the session and release the HTTP session."""
        if self._session_id is not None:
            try:
                await self._call(
                    self._get_http().post,
                    f"https://{self._instance}/services/oauth2/revoke",
                    data={"token": self._session_id},
                )
            except (requests.RequestException, asyncio.TimeoutError) as e:
                logger.warning(f"Salesforce logout failed: {e}")
            self._session_id = None
            self._instance = None
            self._client = None
            logger.info("Disconnected from Salesforce")

        if self._http is not None and self._owns_http:
            self._http.close()
            self._http = None

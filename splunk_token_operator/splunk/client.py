"""Splunk Admin Config Service (ACS) client for HEC tokens.

Creates, reads and deletes HTTP Event Collector tokens through the ACS
``adminconfig/v2/inputs/http-event-collectors`` collection of a Splunk
Cloud stack, authenticating with a JWT bearer token.
"""

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field, ValidationError

from splunk_token_operator.splunk.interfaces import HECToken, TokenManager

logger = logging.getLogger(__name__)

ACS_HOSTNAME = "https://admin.splunk.com"
TOKEN_MANAGEMENT_PATH = "adminconfig/v2/inputs/http-event-collectors"

MISSING_SPLUNK_ERROR = "missing Splunk instance name"
MISSING_JWT_ERROR = "missing Splunk authentication token"

M = TypeVar("M", bound=BaseModel)


class ConfigurationError(Exception):
    """Raised when the client is constructed without a stack name or JWT."""

    pass


class TransportError(Exception):
    """Raised when a request to ACS fails below the HTTP layer."""

    pass


class DecodeError(Exception):
    """Raised when an ACS response body is not the expected JSON."""

    pass


class SplunkAPIError(Exception):
    """Error response returned by ACS."""

    def __init__(self, code: str, message: str, status_code: int | None = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"received error response {self.code}: {self.message}"


class ErrorResponse(BaseModel):
    """Body of an ACS error response."""

    code: str = ""
    message: str = ""


class TokenResponse(BaseModel):
    """Body of an ACS token read."""

    data: HECToken = Field(alias="http-event-collector")


class SplunkClient(TokenManager):
    """ACS implementation of TokenManager for one Splunk stack.

    The client keeps no connection state between calls; every request opens
    its own httpx.AsyncClient, so cancelling the awaiting task aborts the
    request in flight.
    """

    def __init__(
        self,
        splunk_stack: str,
        jwt: str,
        *,
        acs_hostname: str = ACS_HOSTNAME,
        timeout: float | None = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the ACS client.

        Args:
            splunk_stack: Name of the Splunk Cloud stack.
            jwt: ACS authentication token.
            acs_hostname: Base URL of the Admin Config Service.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, used to point the client at
                a fake server in tests.

        Raises:
            ConfigurationError: If splunk_stack or jwt is empty.
        """
        if not splunk_stack:
            raise ConfigurationError(MISSING_SPLUNK_ERROR)
        if not jwt:
            raise ConfigurationError(MISSING_JWT_ERROR)

        self.url = f"{acs_hostname.rstrip('/')}/{splunk_stack}/{TOKEN_MANAGEMENT_PATH}"
        self.timeout = timeout
        self._jwt = jwt
        self._transport = transport

    def _token_url(self, name: str) -> str:
        return f"{self.url}/{quote(name, safe='')}"

    def _headers(self, content_type: bool = False) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._jwt}"}
        if content_type:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                return await client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

    async def create_token(self, token: HECToken) -> HECToken:
        """Create a HEC token on the Splunk stack.

        The default index is added to the allowed indexes before sending. A
        409 (token already exists) is not treated as an error; in every
        accepted case the token is read back, since the create response does
        not carry the token value.
        """
        spec = token.spec.normalized()
        payload = spec.model_dump_json(by_alias=True, exclude_defaults=True)

        logger.debug(f"Creating HEC token {spec.name}")
        response = await self._request(
            "POST",
            self.url,
            content=payload.encode("utf-8"),
            headers=self._headers(content_type=True),
        )

        if response.status_code == httpx.codes.CONFLICT:
            logger.info(f"HEC token {spec.name} already exists, reading it back")
        elif response.status_code >= 400:
            raise self._error_from(response)

        return await self.read_token(spec.name)

    async def read_token(self, name: str) -> HECToken:
        """Read a HEC token, including its value."""
        response = await self._request(
            "GET",
            self._token_url(name),
            headers=self._headers(content_type=True),
        )
        if response.status_code >= 400:
            raise self._error_from(response)
        return _decode(response, TokenResponse).data

    async def delete_token(self, name: str) -> None:
        """Delete a HEC token. A token that does not exist counts as deleted."""
        response = await self._request(
            "DELETE",
            self._token_url(name),
            headers=self._headers(),
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            logger.info(f"HEC token {name} not found, nothing to delete")
            return
        if not response.is_success:
            raise self._error_from(response)
        logger.debug(f"Deleted HEC token {name}")

    @staticmethod
    def _error_from(response: httpx.Response) -> SplunkAPIError:
        error = _decode(response, ErrorResponse)
        return SplunkAPIError(error.code, error.message, status_code=response.status_code)


def _decode(response: httpx.Response, model: type[M]) -> M:
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise DecodeError(
            f"unexpected response body from {response.request.method} "
            f"{response.request.url} (status {response.status_code}): {e}"
        ) from e

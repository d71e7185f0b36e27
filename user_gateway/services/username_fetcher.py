from __future__ import annotations

import abc
import time

import httpx
from loguru import logger

from user_gateway.config import USER_ECHO_SERVICE_ID
from user_gateway.errors import (
    DownstreamStatusError,
    DownstreamUnavailableError,
    MalformedResponseError,
)

USERNAME_PATH = "/user"
TEXT_PLAIN = "text/plain"
DEFAULT_USERNAME = "sherlock"


class UsernameFetcher(abc.ABC):
    """Looks up the username that belongs to a credential."""

    @abc.abstractmethod
    async def find_username(self, authorization: str | None = None) -> str:
        """Return the username for ``authorization``.

        Called without a credential, the lookup runs unauthenticated.
        Failures are raised, never replaced by a fallback value.
        """


class StaticUsernameFetcher(UsernameFetcher):
    """Answers every lookup with the same username, without any network call."""

    def __init__(self, username: str = DEFAULT_USERNAME) -> None:
        self._username = username

    async def find_username(self, authorization: str | None = None) -> str:
        return self._username


def build_username_request(
    client: httpx.AsyncClient,
    authorization: str | None = None,
) -> httpx.Request:
    headers = {"accept": TEXT_PLAIN}
    if authorization is not None:
        headers["authorization"] = authorization
    return client.build_request("GET", USERNAME_PATH, headers=headers)


def parse_username_response(
    response: httpx.Response,
    service: str = USER_ECHO_SERVICE_ID,
) -> str:
    if not response.is_success:
        raise DownstreamStatusError(service, response.status_code)

    content_type = response.headers.get("content-type")
    if content_type is not None:
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type != TEXT_PLAIN:
            raise MalformedResponseError(
                service, f"{service} answered with {media_type!r}, expected {TEXT_PLAIN!r}"
            )

    try:
        return response.content.decode(response.charset_encoding or "utf-8")
    except (UnicodeDecodeError, LookupError) as exc:
        raise MalformedResponseError(
            service, f"{service} body is not valid text: {exc}"
        ) from exc


class UserEchoClient(UsernameFetcher):
    """Asks the ``userecho`` service who owns a credential.

    ``client`` must already be bound to the service's base URL.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        service: str = USER_ECHO_SERVICE_ID,
    ) -> None:
        self._client = client
        self._service = service

    async def find_username(self, authorization: str | None = None) -> str:
        start = time.monotonic()
        request = build_username_request(self._client, authorization)

        logger.debug("→ {} {} {}", self._service, request.method, request.url.path)

        try:
            response = await self._client.send(request)
        except httpx.HTTPError as exc:
            logger.debug(
                "✗ {} {} {} : {}", self._service, request.method, request.url.path, exc
            )
            raise DownstreamUnavailableError(
                self._service, f"{self._service} is unreachable: {exc}"
            ) from exc

        logger.debug(
            "← {} {} ({:.0f}ms)",
            response.status_code,
            self._service,
            (time.monotonic() - start) * 1000,
        )
        return parse_username_response(response, self._service)

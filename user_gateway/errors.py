from __future__ import annotations


class GatewayError(Exception):
    """Base class for every error raised by the gateway."""


class ConfigError(GatewayError):
    """The configuration is missing or cannot be used."""


class DownstreamError(GatewayError):
    """A downstream service call did not produce a usable result."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(message)
        self.service = service


class DownstreamUnavailableError(DownstreamError):
    """The downstream service could not be reached."""


class DownstreamStatusError(DownstreamError):
    """The downstream service answered with a non-success status."""

    def __init__(self, service: str, status_code: int) -> None:
        super().__init__(
            service, f"{service} answered with status {status_code}"
        )
        self.status_code = status_code


class MalformedResponseError(DownstreamError):
    """The downstream body is not plain text."""

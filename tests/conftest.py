from __future__ import annotations

import pytest

from user_gateway.config import AppConfig, Environment, ServiceConfig
from user_gateway.services.username_fetcher import UsernameFetcher

USER_ECHO_URL = "http://userecho.test"


class RecordingFetcher(UsernameFetcher):
    """Returns a canned answer (or raises) and remembers every credential."""

    def __init__(self, username: str = "watson", error: Exception | None = None) -> None:
        self.username = username
        self.error = error
        self.calls: list[str | None] = []

    async def find_username(self, authorization: str | None = None) -> str:
        self.calls.append(authorization)
        if self.error is not None:
            raise self.error
        return self.username


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        environment=Environment.PRODUCTION,
        services={"userecho": ServiceConfig(base_url=USER_ECHO_URL)},
    )


@pytest.fixture
def recording_fetcher() -> RecordingFetcher:
    return RecordingFetcher()

from types import SimpleNamespace

import pytest

from pacstatus import config
from pacstatus.client import client_for_installation
from pacstatus.errors import ConfigurationError


@pytest.mark.asyncio
async def test_no_credentials(monkeypatch):
    monkeypatch.setattr(config, "GITHUB_TOKEN", None)
    monkeypatch.setattr(config, "GITHUB_APP_ID", 0)

    with pytest.raises(ConfigurationError):
        await client_for_installation(SimpleNamespace(), 0)


@pytest.mark.asyncio
async def test_plain_token_without_app(monkeypatch):
    monkeypatch.setattr(config, "GITHUB_TOKEN", "ghp_test")
    monkeypatch.setattr(config, "GITHUB_APP_ID", 0)

    gh = await client_for_installation(SimpleNamespace(), 123)

    assert gh.oauth_token == "ghp_test"

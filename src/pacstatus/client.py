from contextlib import asynccontextmanager
import logging
from typing import AsyncIterator

import aiocache
import aiohttp
import cachetools
from gidgethub import aiohttp as gh_aiohttp
from gidgethub.apps import get_installation_access_token

from pacstatus import config
from pacstatus.errors import ConfigurationError
from pacstatus.github.api import API

logger = logging.getLogger("pacstatus")

_cache = cachetools.LRUCache(maxsize=500)


@aiocache.cached(ttl=config.ACCESS_TOKEN_TTL, key_builder=lambda fn, gh, id: id)
async def get_access_token(gh: gh_aiohttp.GitHubAPI, installation_id: int) -> str:
    logger.debug("Getting NEW installation access token for %d", installation_id)
    access_token_response = await get_installation_access_token(
        gh,
        installation_id=installation_id,
        app_id=config.GITHUB_APP_ID,
        private_key=config.GITHUB_PRIVATE_KEY,
    )

    token = access_token_response["token"]
    return token


def has_app_credentials() -> bool:
    return config.GITHUB_APP_ID > 0 and config.GITHUB_PRIVATE_KEY is not None


async def client_for_installation(
    session: aiohttp.ClientSession, installation_id: int
) -> gh_aiohttp.GitHubAPI:
    if installation_id > 0 and has_app_credentials():
        gh_pre = gh_aiohttp.GitHubAPI(session, "pacstatus", base_url=config.GITHUB_API_URL)
        token = await get_access_token(gh_pre, installation_id)
    elif config.GITHUB_TOKEN is not None:
        token = config.GITHUB_TOKEN
    else:
        raise ConfigurationError("Cannot set status on GitHub, no token or url set")

    return gh_aiohttp.GitHubAPI(
        session,
        "pacstatus",
        oauth_token=token,
        cache=_cache,
        base_url=config.GITHUB_API_URL,
    )


@asynccontextmanager
async def installation_api(installation_id: int) -> AsyncIterator[API]:
    async with aiohttp.ClientSession() as session:
        gh = await client_for_installation(session, installation_id)
        yield API(gh, installation_id)

"""
The raw HTTP requests to the K8s API, one round-trip per call.

There are no retries here: every request either succeeds, or fails with
either a K8s API error (see :mod:`errors`) or a networking error as raised
by the client library. The callers decide what to do with the failures.
"""
import asyncio
import json
from collections.abc import Mapping
from typing import Any

import aiohttp
import yarl

from gaas._cogs.clients import auth, errors
from gaas._cogs.configs import configuration
from gaas._cogs.helpers import typedefs


async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.GatewaySettings,
        payload: object | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:

    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    what = f"{method.upper()} {url}"
    try:
        logger.debug(f"Request: {what}")
        response = await context.session.request(
            method=method,
            url=yarl.URL(url, encoded=True),  # as escaped by the resources, with no normalisation
            json=payload,
            headers=headers,
            timeout=timeout,
        )
        await errors.check_response(response)  # but do not parse it!
    except (aiohttp.ClientError, errors.APIError, asyncio.TimeoutError) as e:
        logger.error(f"Request failed: {what} -> {e!r}")
        raise
    return response


async def get(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.GatewaySettings,
        headers: Mapping[str, str] | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='get',
        url=url,
        headers=headers,
        timeout=timeout,
        context=context,
        settings=settings,
        logger=logger,
    )
    return await parse_response(response, logger=logger)


async def post(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.GatewaySettings,
        payload: object | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='post',
        url=url,
        payload=payload,
        headers=headers,
        timeout=timeout,
        context=context,
        settings=settings,
        logger=logger,
    )
    return await parse_response(response, logger=logger)


async def delete(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: configuration.GatewaySettings,
        payload: object | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='delete',
        url=url,
        payload=payload,
        headers=headers,
        timeout=timeout,
        context=context,
        settings=settings,
        logger=logger,
    )
    return await parse_response(response, logger=logger)


async def parse_response(
        response: aiohttp.ClientResponse,
        *,
        logger: typedefs.Logger,
) -> Any:
    """
    Parse the JSON body of a successful response, and close the response.

    The exchange is already complete at this point, so an unparseable body
    is reported as an API error with the response's status, not as a network error.
    """
    async with response:
        try:
            return await response.json()
        except (aiohttp.ContentTypeError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Unparseable response: {response.method} {response.url} -> {e!r}")
            raise errors.APIResponseError(None, status=response.status, phrase=response.reason) from e

# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 webcontents-client contributors
# This file is part of webcontents-client, distributed under the terms of the GNU GPLv3.
"""
Immutable client configuration.

A `ClientConfig` is never modified after creation. Changing the API URL or key
produces a new value through `ClientConfig.replace`, which re-derives the
request headers from the new values.
"""

import dataclasses
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from webcontents.exceptions import URLNetlocError, URLSchemaError
from webcontents.logger import log_exception

AUTH_HEADER = "API-NUM"
"""Name of the HTTP header carrying the raw API key."""

DEFAULT_TIMEOUT = 30
"""Seconds to wait for the API before the transport gives up."""

ENV_API_URL = "WEBCONTENTS_API_URL"
ENV_API_KEY = "WEBCONTENTS_API_KEY"


def normalize_url(api_url: str) -> str:
    """
    Strip every trailing `/` from the URL and append exactly one.

    Examples
    --------
    >>> normalize_url("https://host.com")
    'https://host.com/'
    >>> normalize_url("https://host.com//")
    'https://host.com/'
    """
    return api_url.rstrip("/") + "/"


def verify_url(api_url: str) -> None:
    """
    Verifies the URL contains a scheme and a hostname.

    Raises
    ------
    URLSchemaError
        If the URL does not contain a scheme (http or https).
    URLNetlocError
        If the URL does not contain a hostname or IP address.
    """
    parsed_url = urlparse(api_url)
    if parsed_url.scheme.lower() not in ("http", "https"):
        error = URLSchemaError(base_url=api_url)
        log_exception(error, severity="ERROR")
        raise error
    if not parsed_url.netloc:
        error = URLNetlocError(base_url=api_url)
        log_exception(error, severity="ERROR")
        raise error


@dataclass(frozen=True)
class ClientConfig:
    """
    Connection settings for a Webcontents API client.

    Use `ClientConfig.create` rather than the constructor, so the URL is
    verified and normalized.
    """

    api_url: str
    """Base URL of the Webcontents API, always ending with a single `/`."""

    api_key: str
    """The raw API key sent in the `API-NUM` header."""

    @classmethod
    def create(cls, api_url: str | None = None, api_key: str | None = None):
        """
        Build a configuration, falling back to environment variables.

        Parameters
        ----------
        api_url : str | None, default=None
            Base URL of the API. Overrides the environment variable `WEBCONTENTS_API_URL`.

        api_key : str | None, default=None
            API key. Overrides the environment variable `WEBCONTENTS_API_KEY`.

        Raises
        ------
        ValueError
            If either value is missing from both the arguments and the environment.
        """
        if api_url is None:
            api_url = os.getenv(ENV_API_URL)
        if api_key is None:
            api_key = os.getenv(ENV_API_KEY)

        if api_url is None or api_key is None:
            raise ValueError(
                "Webcontents API URL and API key must be provided either as arguments or environment variables"
            )

        verify_url(api_url)
        return cls(api_url=normalize_url(api_url), api_key=api_key)

    def replace(self, *, api_url: str | None = None, api_key: str | None = None):
        """Return a new configuration with the given values changed."""
        if api_url is not None:
            verify_url(api_url)
            api_url = normalize_url(api_url)
        changes = {
            key: value
            for key, value in (("api_url", api_url), ("api_key", api_key))
            if value is not None
        }
        return dataclasses.replace(self, **changes)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            AUTH_HEADER: self.api_key,
        }

# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 webcontents-client contributors
# This file is part of webcontents-client, distributed under the terms of the GNU GPLv3.

from collections.abc import Mapping
from ssl import SSLContext
from typing import ClassVar

import httpx

from webcontents.base import (
    REQUEST_LOG_SIZE,
    ApiResult,
    ParamValue,
    RestApiBaseClass,
)
from webcontents.config import DEFAULT_TIMEOUT, ClientConfig
from webcontents.logger import logger


class WebcontentsApiClient(RestApiBaseClass):
    """
    Interact with the Webcontents API.

    Every fetch method sends a `GET` request and never raises on failure.
    Errors are returned as `{"status": False, "message": ..., "data": ...}`,
    while successful responses are returned exactly as decoded from JSON.

    Parameters
    ----------
    api_url : str | None, default=None
        Base URL of the Webcontents API. A single trailing `/` is enforced.

        Overrides the environment variable `WEBCONTENTS_API_URL`.

    api_key : str | None, default=None
        API key sent in the `API-NUM` header.

        Overrides the environment variable `WEBCONTENTS_API_KEY`.

    verify : bool | SSLContext, default=True
        Boolean values will enable or disable the default SSL verification.

        Use an ssl.SSLContext to specify custom Certificate Authority.

    timeout : int, default=30
        Number of seconds to wait for HTTP responses before the request is
        reported as a connection error.

    transport : httpx.BaseTransport | None, default=None
        Custom httpx transport, e.g. `httpx.MockTransport` in tests.

    request_log_size : int, default=100
        Number of recent requests kept in `request_log`.

    Examples
    --------
    ```python
    from webcontents import WebcontentsApiClient
    client = WebcontentsApiClient("https://cms.example.com", "my-api-key")
    client.fetch_events({"timeline": "upcoming", "limit": 5})
    ```
    """

    CONTENT_PATH: ClassVar[str] = "api/webcontents/fetchContent"
    EVENTS_PATH: ClassVar[str] = "api/webcontents/fetchEvents"
    MEDIA_GALLERY_PATH: ClassVar[str] = "api/webcontents/fetchMediaGallery"
    SYSTEM_DATA_PATH: ClassVar[str] = "api/webcontents/fetchSystemData"
    WEBSITE_MENU_PATH: ClassVar[str] = "api/webcontents/fetchWebsiteMenu"

    ADVISORY_PARAMS: ClassVar[dict[str, frozenset[str]]] = {
        CONTENT_PATH: frozenset(
            {
                "name",
                "prefix",
                "id",
                "limit",
                "start",
                "has_uploaded_file",
                "content_type",
            }
        ),
        EVENTS_PATH: frozenset({"timeline", "type", "limit", "start", "id"}),
        MEDIA_GALLERY_PATH: frozenset({"mediaType", "limit", "start", "id"}),
        SYSTEM_DATA_PATH: frozenset(),
        WEBSITE_MENU_PATH: frozenset({"menuLevel", "parentId"}),
    }
    """
    Query parameters documented for each endpoint.

    They are not enforced; unknown keys are sent as given.
    """

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        *,
        verify: SSLContext | bool = True,
        timeout: int = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        request_log_size: int = REQUEST_LOG_SIZE,
    ):
        super().__init__(
            config=ClientConfig.create(api_url=api_url, api_key=api_key),
            verify=verify,
            timeout=timeout,
            transport=transport,
            request_log_size=request_log_size,
        )

    def reconfigure(
        self, *, api_url: str | None = None, api_key: str | None = None
    ) -> "WebcontentsApiClient":
        """
        Return a new client with a different URL and/or key.

        The current client is left untouched, so it can keep serving other
        threads. SSL verification, timeout and transport are carried over.
        """
        config = self.config.replace(api_url=api_url, api_key=api_key)
        return WebcontentsApiClient(
            config.api_url,
            config.api_key,
            verify=self.verify,
            timeout=self.timeout,
            transport=self.transport,
            request_log_size=self.request_log.maxlen or REQUEST_LOG_SIZE,
        )

    def fetch_content(
        self, params: Mapping[str, ParamValue] | None = None
    ) -> ApiResult:
        """
        Retrieve website content items.

        Parameters
        ----------
        params : Mapping | None, default=None
            Filters for the content items:

            - `name` (str): exact name of the content item.
            - `prefix` (str): prefix to search content items by.
            - `id` (int): ID of a single content item.
            - `limit` (int): maximum number of results.
            - `start` (int): offset for pagination.
            - `has_uploaded_file` (bool | str): only content with an associated file.
            - `content_type` (str): e.g. `slider_image`, `page`, `content`.

        Returns
        -------
        ApiResult
            The decoded JSON response, or an error mapping.
        """
        return self._fetch(self.CONTENT_PATH, params)

    def fetch_events(self, params: Mapping[str, ParamValue] | None = None) -> ApiResult:
        """
        Retrieve news, events or blog posts.

        Parameters
        ----------
        params : Mapping | None, default=None
            Filters for the events:

            - `timeline` (str): `upcoming`, `past` or `previous`.
            - `type` (str): `event`, `blog`, `news`, etc.
            - `limit` (int): maximum number of results.
            - `start` (int): offset for pagination.
            - `id` (int): ID of a single event.
        """
        return self._fetch(self.EVENTS_PATH, params)

    def fetch_media_gallery(
        self, params: Mapping[str, ParamValue] | None = None
    ) -> ApiResult:
        """
        Retrieve images or videos from the media gallery.

        Parameters
        ----------
        params : Mapping | None, default=None
            Filters for the gallery:

            - `mediaType` (str): `images` or `videos`.
            - `limit` (int): maximum number of results.
            - `start` (int): offset for pagination.
            - `id` (int): ID of a single gallery item.
        """
        return self._fetch(self.MEDIA_GALLERY_PATH, params)

    def fetch_system_data(
        self, params: Mapping[str, ParamValue] | None = None
    ) -> ApiResult:
        """
        Retrieve general system configuration and data.

        The endpoint documents no parameters.
        """
        return self._fetch(self.SYSTEM_DATA_PATH, params)

    def fetch_website_menu(
        self, params: Mapping[str, ParamValue] | None = None
    ) -> ApiResult:
        """
        Retrieve the navigation menu structure of the website.

        Parameters
        ----------
        params : Mapping | None, default=None
            Filters for the menu items:

            - `menuLevel` (str): `parent`, `child_level_1`, etc.
            - `parentId` (int): ID of the parent menu item.
        """
        return self._fetch(self.WEBSITE_MENU_PATH, params)

    def _fetch(
        self, path: str, params: Mapping[str, ParamValue] | None
    ) -> ApiResult:
        params = params or {}

        unknown = [key for key in params if key not in self.ADVISORY_PARAMS[path]]
        if unknown:
            logger.debug(
                f"Parameters not documented for {path}: {', '.join(map(str, unknown))}"
            )

        return self.send_request(path, "GET", params)

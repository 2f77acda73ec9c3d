# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 webcontents-client contributors
# This file is part of webcontents-client, distributed under the terms of the GNU GPLv3.

import json
import threading
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass
from ssl import SSLContext
from typing import Any, ClassVar
from urllib.parse import urlparse

import arrow
import httpx

from webcontents.config import AUTH_HEADER, DEFAULT_TIMEOUT, ClientConfig
from webcontents.exceptions import (
    CONNECTION_ERROR_PREFIX,
    ApiConnectionError,
    MissingAuthHeaderError,
    RequestFailedError,
    UnsupportedMethodError,
)
from webcontents.interfaces import ApiClient
from webcontents.logger import log_exception, logger, redact_headers

ApiResult = dict[str, Any] | list[Any] | None
"""
The value returned by every fetch operation.

Failures synthesized by the client are `{"status": False, "message": ..., "data": ...}`.
Successful responses are the decoded JSON payload, returned without any wrapping.
"""

ParamValue = str | int | float | bool | None

REQUEST_LOG_SIZE = 100
"""Default number of recent requests kept in `RestApiBaseClass.request_log`."""


@dataclass
class RequestLogEntry:
    """
    Log entry for a sent request.
    """

    method: str
    """The HTTP method of the request."""

    url: str
    """The URL of the request, including any query string."""

    status_code: int | None
    """The HTTP status code of the response, `None` if no response was received."""

    timestamp: arrow.Arrow
    """The timestamp of when the request finished."""


@dataclass(frozen=True)
class RequestContext:
    """
    Everything a single call reads from the client, captured in one step.
    """

    config: ClientConfig
    headers: dict[str, str]
    log_prefix: str


class RestApiBaseClass(ApiClient):
    """
    A base class for REST API clients that never raise on request failures.

    It holds the connection configuration and provides the shared request
    executor, which encodes parameters, attaches headers, sends the request
    through a short-lived `httpx.Client` and maps the outcome to an `ApiResult`.
    """

    SUPPORTED_METHODS: ClassVar[tuple[str, ...]] = (
        "GET",
        "POST",
        "PUT",
        "PATCH",
        "DELETE",
    )
    """HTTP methods accepted by the request executor."""

    def __init__(
        self,
        *,
        config: ClientConfig,
        verify: SSLContext | bool = True,
        timeout: int = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        request_log_size: int = REQUEST_LOG_SIZE,
    ):
        self.config: ClientConfig = config
        """
        The current connection configuration.

        Replaced as a whole by the setters, never modified in place.
        """

        self.headers: dict[str, str] = dict(config.headers)
        """
        HTTP headers sent with each request.

        Contains `Content-Type: application/json` and the `API-NUM` authentication header.
        """

        self.verify: SSLContext | bool = verify
        """
        Controls the verification of the API server SSL certificate.

        Examples
        --------

        - `True`: Verify the server's SSL certificate using the system's CA certificates.
        - `False`: Disable SSL certificate verification.
        - `ssl.create_default_context(cafile="my-custom-ca.pem")`: Use a custom CA certificate for verification.
        """

        self.timeout: int = timeout
        """The timeout in seconds for each request to the API server."""

        self.transport: httpx.BaseTransport | None = transport
        """
        Optional httpx transport used instead of the network.

        `httpx.MockTransport` can be used to simulate the API server.
        """

        self.request_index: int = 0
        """
        Number of requests started by this client, used to prefix log records.
        """

        self.request_log: deque[RequestLogEntry] = deque(maxlen=request_log_size)
        """
        The most recent requests sent to the API server, oldest first.

        Holds at most `request_log_size` entries. Diagnostic only, never read
        by the client itself.
        """

        self._config_lock: threading.Lock = threading.Lock()
        """Guards `config`, `headers` and `request_index`."""

        if not self.verify:
            logger.warning(f"Disabling SSL verification for {self.base_url}")

    @property
    def base_url(self) -> str:  # type: ignore[override]
        return self.config.api_url

    def get_api_url(self) -> str:
        """Return the normalized base URL, always ending with a single `/`."""
        return self.config.api_url

    def set_api_url(self, api_url: str) -> None:
        """
        Change the base URL used by subsequent requests.

        Trailing slashes are normalized to exactly one.
        """
        with self._config_lock:
            self.config = self.config.replace(api_url=api_url)
        logger.debug(f"API URL changed to {self.config.api_url}")

    def get_api_key(self) -> str:
        return self.config.api_key

    def set_api_key(self, api_key: str) -> None:
        """
        Change the API key and update the `API-NUM` header in place.

        Raises
        ------
        MissingAuthHeaderError
            If the `API-NUM` header has been removed from `headers`.
        """
        with self._config_lock:
            if AUTH_HEADER not in self.headers:
                error = MissingAuthHeaderError(header=AUTH_HEADER)
                log_exception(error, severity="ERROR")
                raise error
            self.config = self.config.replace(api_key=api_key)
            self.headers[AUTH_HEADER] = api_key
        logger.debug("API key changed")

    @property
    def api_url(self) -> str:
        return self.get_api_url()

    @api_url.setter
    def api_url(self, value: str) -> None:
        self.set_api_url(value)

    @property
    def api_key(self) -> str:
        return self.get_api_key()

    @api_key.setter
    def api_key(self, value: str) -> None:
        self.set_api_key(value)

    def build_url(self, path: str, config: ClientConfig | None = None) -> str:
        """
        Join an endpoint path to the base URL.

        Parameters
        ----------
        path
            Path relative to the base URL, e.g. `api/webcontents/fetchContent`.
            Absolute `http(s)://` URLs are returned unchanged.
        config
            Configuration to take the base URL from. Defaults to the current one.
        """
        if urlparse(path).scheme:
            return path
        config = config or self.config
        return f"{config.api_url}{path.lstrip('/')}"

    def _request_context(self) -> RequestContext:
        with self._config_lock:
            self.request_index += 1
            return RequestContext(
                config=self.config,
                headers=self.headers.copy(),
                log_prefix=f"Request #{self.request_index}",
            )

    @staticmethod
    def serialize_params(
        params: Mapping[str, ParamValue],
    ) -> list[tuple[str, str]]:
        """
        Convert query parameters to ordered string pairs.

        Booleans become `1` and `0`, `None` values are left out and everything
        else is converted with `str()`. The order of the mapping is kept.
        """
        pairs = []
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = "1" if value else "0"
            pairs.append((str(key), str(value)))
        return pairs

    @staticmethod
    def serialize_payload(params: Mapping[str, Any] | None) -> str:
        if params:
            return json.dumps(dict(params))
        return ""

    @staticmethod
    def encode_headers(headers: Mapping[str, str]) -> dict[str, bytes]:
        """
        Encode header values as UTF-8, so keys outside ASCII are sent as given.
        """
        return {name: value.encode("utf-8") for name, value in headers.items()}

    @staticmethod
    def decode_response(response: httpx.Response) -> Any:
        """
        Decode a JSON response body, returning `None` if it is not valid JSON.
        """
        try:
            return response.json()
        except ValueError:
            return None

    def _connection_error(
        self, error: Exception, url: str, request_log_prefix: str
    ) -> ApiConnectionError:
        connection_error = ApiConnectionError(
            message=CONNECTION_ERROR_PREFIX + str(error),
            url=url,
            error=error,
        )
        log_exception(connection_error, severity="CRITICAL", request=request_log_prefix)
        return connection_error

    def _prepare_request(
        self,
        client: httpx.Client,
        method: str,
        url: str,
        params: Mapping[str, Any],
        context: RequestContext,
    ) -> httpx.Request:
        """
        Encode parameters as query string or JSON body and build the request.

        Parameters
        ----------
        method
            The HTTP method, already upper case.
        url
            The full URL of the endpoint.
        params
            Query parameters for `GET`, JSON payload for any other method.
        context
            Headers and log prefix captured when the call started.

        Raises
        ------
        ApiConnectionError
            If httpx cannot build a request for the URL.
        """
        query = None
        content = None

        if method == "GET":
            if params:
                query = self.serialize_params(params)
        else:
            content = self.serialize_payload(params)

        try:
            return client.build_request(
                method,
                url,
                params=query,
                content=content,
                headers=self.encode_headers(context.headers),
            )
        except httpx.InvalidURL as error:
            raise self._connection_error(error, url, context.log_prefix) from error

    def _send_single_request(
        self,
        client: httpx.Client,
        request: httpx.Request,
        request_log_prefix: str,
    ) -> httpx.Response:
        """
        Send a prepared request, logging both sides of the exchange.

        Raises
        ------
        ApiConnectionError
            If no response was received.
        """
        log = logger.bind(request=request_log_prefix)

        log.trace(f"Prepared {request_log_prefix}: {request.method} {request.url}")
        request_headers = redact_headers(request.headers, AUTH_HEADER)
        log.trace(f"Prepared {request_log_prefix} headers: {json.dumps(request_headers)}")
        log.trace(f"Prepared {request_log_prefix} body: {request.content}")

        try:
            response = client.send(request)
        except httpx.RequestError as error:
            self.request_log.append(
                RequestLogEntry(
                    method=request.method,
                    url=str(request.url),
                    status_code=None,
                    timestamp=arrow.utcnow(),
                )
            )
            raise self._connection_error(
                error, str(request.url), request_log_prefix
            ) from error

        self.request_log.append(
            RequestLogEntry(
                method=request.method,
                url=str(response.url),
                status_code=response.status_code,
                timestamp=arrow.utcnow(),
            )
        )

        log.debug(f"{request_log_prefix}: {request.method} {request.url}")
        log.trace(
            f"{request_log_prefix} status code: {response.status_code} {response.reason_phrase}"
        )
        log.trace(f"{request_log_prefix} body: {response.text}")

        return response

    def _handle_response(
        self, response: httpx.Response, request_log_prefix: str
    ) -> ApiResult:
        """
        Classify the response by status code and decode its body.

        Raises
        ------
        RequestFailedError
            If the status code is 400 or above.
        """
        decoded = self.decode_response(response)

        if response.status_code >= 400:
            message = None
            if isinstance(decoded, dict):
                message = decoded.get("message")
            if message is None:
                message = f"API request failed with HTTP code {response.status_code}"

            logger.bind(request=request_log_prefix).error(
                f"{request_log_prefix} failed with status code {response.status_code}"
            )
            raise RequestFailedError(
                message=str(message),
                url=str(response.url),
                status_code=response.status_code,
                data=decoded,
            )

        return decoded

    def send_request(
        self,
        url: str,
        method: str = "GET",
        params: Mapping[str, Any] | None = None,
    ) -> ApiResult:
        """
        Send any type of HTTP request and return the decoded result.

        Transport and HTTP failures are returned as
        `{"status": False, "message": ..., "data": ...}` instead of being raised.

        URL, headers and log prefix are all taken from one snapshot of the
        configuration, so a concurrent `set_api_url` or `set_api_key` affects
        either the whole request or none of it.

        Parameters
        ----------
        url
            The full URL of the endpoint, or a path relative to the base URL.
        method
            The HTTP method (`GET`, `POST`, `PUT`, `PATCH`, `DELETE`).
        params
            Sent as query string for `GET` and as JSON body for other methods.
            Nothing is sent when empty.

        Raises
        ------
        UnsupportedMethodError
            If `method` is not one of the supported HTTP methods.
        """
        method = method.upper()
        if method not in self.SUPPORTED_METHODS:
            error = UnsupportedMethodError(method=method, client=self)
            log_exception(error)
            raise error

        context = self._request_context()
        url = self.build_url(url, config=context.config)

        try:
            with httpx.Client(
                verify=self.verify,
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=False,
            ) as client:
                request = self._prepare_request(
                    client, method, url, params or {}, context
                )
                response = self._send_single_request(
                    client, request, context.log_prefix
                )
            return self._handle_response(response, context.log_prefix)
        except (ApiConnectionError, RequestFailedError) as error:
            return error.as_result()

# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 webcontents-client contributors
# This file is part of webcontents-client, distributed under the terms of the GNU GPLv3.
from dataclasses import dataclass
from typing import Any, Literal

from rich import traceback

from webcontents.interfaces import ApiClient

CONNECTION_ERROR_PREFIX = "API connection error: "
"""Prefix of every message synthesized for a transport failure."""


@dataclass
class WebcontentsException(Exception):
    """
    Base exception class for all webcontents exceptions.
    """

    message: str = ""

    def __post_init__(self):
        traceback.install()

    def __str__(self) -> str:
        return self.message


@dataclass
class ApiConnectionError(WebcontentsException):
    """
    Raised internally when an HTTP call could not complete at all.

    DNS failures, refused connections, TLS errors and transport timeouts all
    end up here, distinguished only by the text of the underlying error.
    Fetch operations never let it escape; it is converted with `as_result()`.
    """

    url: str | None = None
    """The URL that was requested."""

    error: Exception | None = None
    """The transport error raised by httpx."""

    def __str__(self) -> str:
        msg = self.message

        if self.url:
            msg += f"\nRequest URL: {self.url}"

        return msg

    def as_result(self) -> dict[str, Any]:
        return {"status": False, "message": self.message, "data": None}


@dataclass
class RequestFailedError(WebcontentsException):
    """
    Raised internally when the API answered with HTTP status code 400 or above.

    Examples
    --------

    1. The API responds `404` with `{"message": "not found"}`.
    2. `as_result()` returns
       `{"status": False, "message": "not found", "data": {"message": "not found"}}`.
    """

    url: str | None = None
    """The URL that was requested."""

    status_code: int | None = None
    """The HTTP status code returned by the API."""

    data: Any = None
    """The decoded response body, or `None` if it was not valid JSON."""

    def __str__(self) -> str:
        msg = self.message

        if self.status_code is not None:
            msg += f"\nFailed with status code: {self.status_code}"
        if self.url:
            msg += f"\nRequest URL: {self.url}"

        return msg

    def as_result(self) -> dict[str, Any]:
        return {"status": False, "message": self.message, "data": self.data}


@dataclass
class UnsupportedMethodError(WebcontentsException):
    """
    Raised when the request executor is asked for an unknown HTTP method.
    """

    method: str | None = None
    """The HTTP method that is not supported."""

    client: ApiClient | None = None
    """The client instance that received the method."""

    def __str__(self) -> str:
        msg = self.message

        if isinstance(self.client, ApiClient):
            client_name = self.client.__class__.__name__
        else:
            client_name = "this API"

        if self.method:
            msg += f"\n{self.method} not supported by {client_name}"

        return msg


@dataclass
class MissingAuthHeaderError(WebcontentsException):
    """
    Raised when the API key is rotated but the `API-NUM` header is gone.

    The header is created at construction, so this only happens when
    it has been removed from `client.headers` by hand.
    """

    header: Literal["API-NUM"] = "API-NUM"
    """Name of the authentication header."""

    def __str__(self) -> str:
        msg = self.message
        msg += f"\nAuthentication header '{self.header}' not found in client headers"
        return msg


@dataclass
class URLSchemaError(WebcontentsException):
    """
    Raised when the provided base URL does not include a valid schema (http or https).
    """

    base_url: str | None = None
    """The invalid base URL."""

    def __str__(self) -> str:
        msg = self.message

        if self.base_url:
            msg += f"\nInvalid base URL: {self.base_url}"
            msg += "\nThe base URL must start with 'http://' or 'https://'."

        return msg


@dataclass
class URLNetlocError(WebcontentsException):
    """
    Raised when the provided base URL does not include a valid network location.
    """

    base_url: str | None = None
    """The invalid base URL."""

    def __str__(self) -> str:
        msg = self.message

        if self.base_url:
            msg += f"\nInvalid base URL: {self.base_url}"
            msg += "\nThe base URL must include a valid network location."

        return msg

# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 webcontents-client contributors
# This file is part of webcontents-client, distributed under the terms of the GNU GPLv3.

from importlib import metadata

from webcontents.base import ApiResult, RestApiBaseClass
from webcontents.client import WebcontentsApiClient
from webcontents.config import ClientConfig
from webcontents.logger import log_to_file, set_logging_level

__version__ = metadata.version("webcontents-client")

__all__ = [
    "ApiResult",
    "ClientConfig",
    "RestApiBaseClass",
    "WebcontentsApiClient",
    "set_logging_level",
    "log_to_file",
]

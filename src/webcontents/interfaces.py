# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 webcontents-client contributors
# This file is part of webcontents-client, distributed under the terms of the GNU GPLv3.

from abc import ABC


class ApiClient(ABC):
    base_url: str | None = None
    """The normalized base URL for the API, ending with a single `/`."""

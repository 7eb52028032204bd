# -*- coding: utf-8 -*-
"""Client errors."""

from __future__ import annotations

from typing import Optional


class ApiError(Exception):
    """Non-2xx response or transport failure.

    `status` is None when the request never produced a response.
    """

    def __init__(self, status: Optional[int], detail: str) -> None:
        super().__init__(f"{status or 'network'}: {detail}")
        self.status = status
        self.detail = detail

    @property
    def is_network_error(self) -> bool:
        return self.status is None

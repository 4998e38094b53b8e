# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared response models."""

from math import ceil
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PagedResult(BaseModel, Generic[T]):
    """One page of an ordered result set.

    Pages are 1-based. Instances are immutable once built.
    """

    model_config = ConfigDict(frozen=True)

    items: list[T] = Field(default_factory=list)
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_elements: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    has_next: bool
    has_previous: bool

    @classmethod
    def from_page(
        cls,
        items: list[T],
        page: int,
        page_size: int,
        total_elements: int,
    ) -> "PagedResult[T]":
        """Build a page and derive its navigation metadata.

        Args:
            items: Items on this page.
            page: 1-based page number.
            page_size: Requested page size.
            total_elements: Size of the full result set.

        Returns:
            PagedResult with total_pages, has_next and has_previous set.
        """
        total_pages = ceil(total_elements / page_size) if total_elements else 0
        return cls(
            items=items,
            page=page,
            page_size=page_size,
            total_elements=total_elements,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        )

    @classmethod
    def empty(cls, page: int, page_size: int) -> "PagedResult[T]":
        """Build an empty page."""
        return cls.from_page([], page, page_size, 0)

"""
Paging: the query parameters of a collection request and the paged query result

Page indices are zero based, eg. ``?pageIndex=0&pageSize=10`` returns the first ten items.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, List, Mapping, Optional, TypeVar

import sqlalchemy
import hypershape
from .config import get_int_config
from .errors import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class QueryParameters:
    """
    Collection query arguments: pageIndex, pageSize, orderBy, fields
    """

    page_index: int = 0
    page_size: int = 10
    order_by: Optional[str] = None
    fields: Optional[str] = None

    @classmethod
    def from_request(cls, args: Mapping[str, Any]) -> "QueryParameters":
        """
        :param args: request query arguments (eg. flask `request.args`)
        :return: QueryParameters, the page size is limited to MAX_PAGE_SIZE
        """
        try:
            page_index = int(args.get("pageIndex", 0))
            page_size = int(args.get("pageSize", get_int_config("DEFAULT_PAGE_SIZE")))
        except (TypeError, ValueError):
            raise ValidationError("Pagination Value Error")

        if page_index < 0:
            raise ValidationError(f"Invalid pageIndex {page_index}")
        if page_size <= 0:
            page_size = 1
        max_page_size = get_int_config("MAX_PAGE_SIZE")
        if page_size > max_page_size:
            hypershape.log.debug(f"pageSize {page_size} exceeds the maximum page size {max_page_size}")
            page_size = max_page_size

        order_by = (args.get("orderBy") or "").strip() or None
        fields = (args.get("fields") or "").strip() or None
        return cls(page_index=page_index, page_size=page_size, order_by=order_by, fields=fields)


@dataclass
class PaginatedList(Generic[T]):
    """
    A page of items with the paging metadata
    """

    items: List[T]
    page_index: int
    page_size: int
    total_items_count: int
    page_count: int = field(init=False)

    def __post_init__(self) -> None:
        self.page_count = math.ceil(self.total_items_count / self.page_size) if self.page_size > 0 else 0

    @property
    def has_previous(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        return self.page_index < self.page_count - 1

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def from_query(cls, query: Any, params: QueryParameters) -> "PaginatedList":
        """
        Execute the paged query

        :param query: list or SQLAlchemy query (already filtered and sorted)
        :param params: QueryParameters
        :return: PaginatedList
        """
        offset = params.page_index * params.page_size
        if isinstance(query, (list, tuple)):
            count = len(query)
            items = list(query[offset : offset + params.page_size])
        else:
            try:
                count = query.count()
                items = query.offset(offset).limit(params.page_size).all()
            except OverflowError:
                raise ValidationError("Pagination Overflow Error")
            except sqlalchemy.exc.CompileError as exc:  # pragma: no cover
                # eg. MSSQL requires an order_by when using OFFSET
                hypershape.log.warning(f"{exc} / Add a valid orderBy= URL parameter")
                raise ValidationError("Pagination requires an orderBy parameter")
        return cls(items, params.page_index, params.page_size, count)

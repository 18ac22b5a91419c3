"""
Hypermedia (HATEOAS) links and pagination metadata

Links are created with an injected uri resolver: a callable that takes a route name
and the route parameters and returns an absolute uri (cfr. `flask.url_for(..., _external=True)`).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Union

from .fields import FieldSpec

UriResolver = Callable[[str, Mapping[str, Any]], str]


@dataclass(frozen=True)
class LinkDescriptor:
    href: str
    rel: str
    method: str = "GET"

    def to_dict(self) -> Dict[str, str]:
        return {"href": self.href, "rel": self.rel, "method": self.method}


class PaginationResourceUriType(enum.Enum):
    PREVIOUS = "previous"
    CURRENT = "current"
    NEXT = "next"


class PageParameters(Protocol):
    """Paging parameters of the current request, cfr. QueryParameters"""

    page_index: int
    page_size: int
    order_by: Optional[str]
    fields: Optional[str]


class PageInfo(Protocol):
    """Paging result of the query layer, cfr. PaginatedList"""

    page_index: int
    page_size: int
    total_items_count: int
    page_count: int


@dataclass(frozen=True)
class PageMetadata:
    page_size: int
    page_index: int
    total_items_count: int
    page_count: int
    previous_page_link: Optional[str] = None
    next_page_link: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        :return: camelCase dict, this is serialized in the pagination response header
        """
        return {
            "pageSize": self.page_size,
            "pageIndex": self.page_index,
            "totalItemsCount": self.total_items_count,
            "pageCount": self.page_count,
            "previousPageLink": self.previous_page_link,
            "nextPageLink": self.next_page_link,
        }


def _fields_value(fields: Union[FieldSpec, str, None]) -> Optional[str]:
    if isinstance(fields, FieldSpec):
        return None if fields.is_all else ",".join(fields)
    if fields is None or FieldSpec.parse(fields).is_all:
        return None
    return fields


class PaginationLinkBuilder:
    """
    Creates the previous/current/next page links of a collection route

    :param route_name: name of the collection route
    """

    _offsets = {
        PaginationResourceUriType.PREVIOUS: -1,
        PaginationResourceUriType.CURRENT: 0,
        PaginationResourceUriType.NEXT: 1,
    }

    def __init__(self, route_name: str) -> None:
        self.route_name = route_name

    def link_parameters(self, params: PageParameters, direction: PaginationResourceUriType) -> Dict[str, Any]:
        result = {
            "pageIndex": params.page_index + self._offsets[direction],
            "pageSize": params.page_size,
            "orderBy": getattr(params, "order_by", None),
            "fields": _fields_value(getattr(params, "fields", None)),
        }
        return {k: v for k, v in result.items() if v is not None}

    def build_link(self, params: PageParameters, direction: PaginationResourceUriType, resolve_uri: UriResolver) -> str:
        """
        The page index isn't bounds checked, only request the previous/next page if it exists
        """
        return resolve_uri(self.route_name, self.link_parameters(params, direction))

    def build_page_metadata(
        self, page_info: PageInfo, has_previous: bool, has_next: bool, resolve_uri: UriResolver, params: Optional[PageParameters] = None
    ) -> PageMetadata:
        """
        :param page_info: paging result (counts)
        :param params: paging parameters of the current request, the links use `page_info` if omitted
        :return: PageMetadata with the previous/next links if these pages exist
        """
        params = page_info if params is None else params
        previous_page_link = self.build_link(params, PaginationResourceUriType.PREVIOUS, resolve_uri) if has_previous else None
        next_page_link = self.build_link(params, PaginationResourceUriType.NEXT, resolve_uri) if has_next else None
        return PageMetadata(
            page_size=page_info.page_size,
            page_index=page_info.page_index,
            total_items_count=page_info.total_items_count,
            page_count=page_info.page_count,
            previous_page_link=previous_page_link,
            next_page_link=next_page_link,
        )


class LinkAssembler:
    """
    Creates the links of a single resource and of a resource collection

    :param item_route: name of the route returning a single resource
    :param delete_route: name of the route deleting a single resource
    :param collection_route: name of the collection route
    :param resource_name: used for the delete relation, eg. "post" => "delete_post"
    :param id_param: name of the item route id parameter
    """

    def __init__(self, item_route: str, delete_route: str, collection_route: str, resource_name: str, id_param: str = "id") -> None:
        self.item_route = item_route
        self.delete_route = delete_route
        self.id_param = id_param
        self.delete_rel = f"delete_{resource_name.lower()}"
        self.pagination = PaginationLinkBuilder(collection_route)

    def links_for_resource(self, id: Any, fields: Union[FieldSpec, str, None], resolve_uri: UriResolver) -> List[LinkDescriptor]:
        """
        :return: [self, delete] links, the self link keeps the requested fields
        """
        self_params = {self.id_param: id}
        fields = _fields_value(fields)
        if fields is not None:
            self_params["fields"] = fields
        return [
            LinkDescriptor(resolve_uri(self.item_route, self_params), "self", "GET"),
            LinkDescriptor(resolve_uri(self.delete_route, {self.id_param: id}), self.delete_rel, "DELETE"),
        ]

    def links_for_collection(self, params: PageParameters, has_previous: bool, has_next: bool, resolve_uri: UriResolver) -> List[LinkDescriptor]:
        """
        :return: [self, previous_page, next_page] links, previous and next only if these pages exist
        """
        build_link = self.pagination.build_link
        links = [LinkDescriptor(build_link(params, PaginationResourceUriType.CURRENT, resolve_uri), "self", "GET")]
        if has_previous:
            links.append(LinkDescriptor(build_link(params, PaginationResourceUriType.PREVIOUS, resolve_uri), "previous_page", "GET"))
        if has_next:
            links.append(LinkDescriptor(build_link(params, PaginationResourceUriType.NEXT, resolve_uri), "next_page", "GET"))
        return links

    def build_page_metadata(
        self, page_info: PageInfo, has_previous: bool, has_next: bool, resolve_uri: UriResolver, params: Optional[PageParameters] = None
    ) -> PageMetadata:
        return self.pagination.build_page_metadata(page_info, has_previous, has_next, resolve_uri, params)

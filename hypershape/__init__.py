# flake8: noqa: F401
#
# hypershape: resource shaping (sparse fieldsets), sort key validation and HATEOAS links for Flask APIs
#
from .hypershape_init import HyperShape, log
from .errors import (
    HyperShapeError,
    ValidationError,
    InvalidFieldSpecError,
    InvalidSortKeyError,
    ConfigurationMissingError,
    NotFoundError,
)
from .resource_type import FieldDescriptor, ResourceType, ResourceTypeRegistry
from .fields import FieldSpec, type_has_properties, validate_fields_param, parse_fields_param
from .sorting import SortProperty, SortMapping, SortMappingRegistry, validate_order_by_param, parse_order_by
from .shaping import ShapedResource, ResourceShaper, shape, shape_many
from .links import LinkDescriptor, PageMetadata, PaginationResourceUriType, PaginationLinkBuilder, LinkAssembler
from .pagination import QueryParameters, PaginatedList
from .json_encoder import HyperShapeJSONProvider, HyperShapeJSONEncoder
from .hypershape_api import HyperShapeApi, flask_uri_resolver
from .endpoint import ShapedResourceEndpoint
from .repository import QueryRepository
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "HyperShape",
    "HyperShapeApi",
    "ShapedResourceEndpoint",
    "QueryRepository",
    "flask_uri_resolver",
    # resource types:
    "FieldDescriptor",
    "ResourceType",
    "ResourceTypeRegistry",
    # fields:
    "FieldSpec",
    "type_has_properties",
    "validate_fields_param",
    "parse_fields_param",
    # sorting:
    "SortProperty",
    "SortMapping",
    "SortMappingRegistry",
    "validate_order_by_param",
    "parse_order_by",
    # shaping:
    "ShapedResource",
    "ResourceShaper",
    "shape",
    "shape_many",
    # links:
    "LinkDescriptor",
    "PageMetadata",
    "PaginationResourceUriType",
    "PaginationLinkBuilder",
    "LinkAssembler",
    # paging:
    "QueryParameters",
    "PaginatedList",
    # json:
    "HyperShapeJSONProvider",
    "HyperShapeJSONEncoder",
    # Errors:
    "HyperShapeError",
    "ValidationError",
    "InvalidFieldSpecError",
    "InvalidSortKeyError",
    "ConfigurationMissingError",
    "NotFoundError",
)

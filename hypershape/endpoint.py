#  This file contains the shaped resource endpoints:
#  - ShapedResourceEndpoint ties a resource type, its sort mapping, a repository and a projector together
#  - flask-restful "Resource" objects that serve the endpoint collection, items and deletes
#
#  Request processing order:
#  1. validate orderBy and fields, invalid requests fail with 400 before any shaping
#  2. fetch the entities from the repository (404 for missing items)
#  3. project the entities to resources and shape them
#  4. add the links, the collection paging metadata is sent in the pagination header
#
import json
from http import HTTPStatus
from flask import jsonify, make_response, request
from flask_restful import Resource
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple, Type
import hypershape
from .config import get_config
from .errors import ConfigurationMissingError, NotFoundError
from .fields import FieldSpec, parse_fields_param
from .hypershape_api import flask_uri_resolver
from .json_encoder import HyperShapeJSONEncoder
from .links import LinkAssembler, PageMetadata, UriResolver
from .pagination import PaginatedList, QueryParameters
from .resource_type import ResourceType, ResourceTypeRegistry
from .shaping import ResourceShaper, ShapedResource
from .sorting import SortMapping, SortMappingRegistry, parse_order_by_param


class Repository(Protocol):
    """Query layer used by the endpoint"""

    def get_page(self, params: QueryParameters, sort_mapping: SortMapping) -> PaginatedList:
        ...

    def get_by_id(self, id: Any) -> Optional[Any]:
        ...


class ShapedResourceEndpoint:
    """
    :param name: resource name, eg. "Post", used for the route names and the delete relation
    :param resource_class: the exposed resource class, eg. PostResource
    :param entity_class: the persisted entity class, eg. Post
    :param repository: Repository returning entities
    :param sort_mappings: SortMappingRegistry holding the (resource_class, entity_class) mapping
    :param resource_types: optional ResourceTypeRegistry, the resource type is derived from `resource_class` if omitted
    :param projector: converts an entity to a resource, eg. `PostResource.model_validate`
    :param collection_name: url path of the collection, defaults to the lowercased plural name
    :param plural: plural name used for the collection route, eg. "getPosts", defaults to `name` + "s"
    :param id_param: route parameter holding the id
    :param id_converter: werkzeug url converter for the id
    :param id_field: resource field holding the id, used for the item links in collections
    """

    def __init__(
        self,
        name: str,
        resource_class: Type[Any],
        entity_class: Type[Any],
        repository: Repository,
        sort_mappings: SortMappingRegistry,
        resource_types: Optional[ResourceTypeRegistry] = None,
        projector: Optional[Callable[[Any], Any]] = None,
        collection_name: Optional[str] = None,
        plural: Optional[str] = None,
        id_param: str = "id",
        id_converter: str = "int",
        id_field: str = "id",
    ) -> None:
        self.name = name
        self.resource_class = resource_class
        self.entity_class = entity_class
        self.repository = repository
        self.projector = projector or (lambda entity: entity)
        plural = plural or f"{name}s"
        self.collection_name = collection_name or plural.lower()
        self.id_param = id_param
        self.id_converter = id_converter

        if resource_types is not None:
            self.resource_type: ResourceType = resource_types.get(resource_class)
        else:
            self.resource_type = ResourceType.from_class(resource_class, name=name)

        # fail at startup when the configuration is incomplete
        self.sort_mappings = sort_mappings
        self.sort_mapping = sort_mappings.resolve(resource_class, entity_class)
        id_descriptor = self.resource_type.get_field(id_field)
        self.id_field = id_descriptor.name if id_descriptor is not None else None

        self.collection_route = f"get{plural}"
        self.item_route = f"get{name}"
        self.delete_route = f"delete{name}"
        self.shaper = ResourceShaper(self.resource_type)
        self.links = LinkAssembler(self.item_route, self.delete_route, self.collection_route, name, id_param=id_param)

    def __repr__(self) -> str:
        return f"<ShapedResourceEndpoint {self.name}>"

    def validate_order_by(self, order_by: Optional[str]) -> None:
        parse_order_by_param(self.sort_mappings, self.resource_class, self.entity_class, order_by)

    def validate_fields(self, fields: Optional[str]) -> FieldSpec:
        return parse_fields_param(self.resource_type, fields)

    def get_collection(self, args: Mapping[str, Any], resolve_uri: UriResolver) -> Tuple[Dict[str, Any], PageMetadata]:
        """
        :param args: request query arguments
        :param resolve_uri: uri resolver
        :return: response body and the paging metadata
        """
        params = QueryParameters.from_request(args)
        self.validate_order_by(params.order_by)
        fields = self.validate_fields(params.fields)

        page = self.repository.get_page(params, self.sort_mapping)
        resources = (self.projector(entity) for entity in page)
        shaped_resources = list(self.shaper.shape_many(resources, fields))
        for shaped in shaped_resources:
            self.add_item_links(shaped, fields, resolve_uri)

        body = {
            "value": shaped_resources,
            "links": self.links.links_for_collection(params, page.has_previous, page.has_next, resolve_uri),
        }
        meta = self.links.build_page_metadata(page, page.has_previous, page.has_next, resolve_uri, params=params)
        hypershape.log.debug(f"{self}: returning {len(shaped_resources)} of {page.total_items_count} items")
        return body, meta

    def add_item_links(self, shaped: ShapedResource, fields: FieldSpec, resolve_uri: UriResolver) -> ShapedResource:
        """
        Add the item links when the shaped resource contains the id
        """
        if self.id_field is not None and self.id_field in shaped:
            shaped.add("links", self.links.links_for_resource(shaped[self.id_field], fields, resolve_uri))
        return shaped

    def get_item(self, id: Any, fields: Optional[str], resolve_uri: UriResolver) -> ShapedResource:
        """
        The fields are validated before the item lookup

        :raises NotFoundError: when the repository doesn't return the item
        """
        field_spec = self.validate_fields(fields)
        entity = self.repository.get_by_id(id)
        if entity is None:
            raise NotFoundError(f"{self.name} {id}")
        shaped = self.shaper.shape(self.projector(entity), field_spec)
        shaped.add("links", self.links.links_for_resource(id, field_spec, resolve_uri))
        return shaped

    def delete_item(self, id: Any) -> None:
        delete = getattr(self.repository, "delete", None)
        if delete is None:
            raise ConfigurationMissingError(f"{self.repository} doesn't support deletes")
        if not delete(id):
            raise NotFoundError(f"{self.name} {id}")


class ShapedResourceAPI(Resource):
    """
    Superclass of the exposed routes, subclasses are created by HyperShapeApi.expose_resource
    """

    endpoint_config: ShapedResourceEndpoint = None


class ShapedCollectionResource(ShapedResourceAPI):
    def get(self, **kwargs):
        """
        HTTP GET: return a page of shaped resources, the paging metadata is sent in the pagination header
        """
        body, meta = self.endpoint_config.get_collection(request.args, flask_uri_resolver)
        response = make_response(jsonify(body))
        response.headers[get_config("PAGINATION_HEADER")] = json.dumps(meta.to_dict(), cls=HyperShapeJSONEncoder)
        return response


class ShapedItemResource(ShapedResourceAPI):
    def get(self, **kwargs):
        """
        HTTP GET: return a single shaped resource with its links
        """
        id = kwargs[self.endpoint_config.id_param]
        result = self.endpoint_config.get_item(id, request.args.get("fields"), flask_uri_resolver)
        return make_response(jsonify(result))


class ShapedDeleteResource(ShapedResourceAPI):
    def delete(self, **kwargs):
        """
        HTTP DELETE: delete a single resource
        """
        id = kwargs[self.endpoint_config.id_param]
        self.endpoint_config.delete_item(id)
        return make_response("", HTTPStatus.NO_CONTENT)

"""
Resource shaping: project a resource to all or a subset of its declared fields

The shaped result is an ordered mapping, computed members ("links") can be added afterwards
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, Union

import hypershape
from http import HTTPStatus
from .errors import InvalidFieldSpecError
from .fields import FieldSpec
from .resource_type import FieldDescriptor, ResourceType


class ShapedResource(dict):
    """
    Ordered mapping of field names (as declared) to values,
    extended with computed members such as "links"
    """

    def add(self, key: str, value: Any) -> "ShapedResource":
        """
        Append a computed member

        :raises KeyError: if the key is already present
        """
        if key in self:
            raise KeyError(f"{key!r} is already present in the shaped resource")
        self[key] = value
        return self


class ResourceShaper:
    """
    Shapes instances of a single resource type

    :param resource_type: ResourceType of the shaped instances
    """

    def __init__(self, resource_type: ResourceType) -> None:
        self.resource_type = resource_type

    def _selected_fields(self, fields: Union[FieldSpec, str, None]) -> tuple[FieldDescriptor, ...]:
        spec = fields if isinstance(fields, FieldSpec) else FieldSpec.parse(fields)
        if spec.is_all:
            return self.resource_type.fields
        result = []
        for name in spec:
            descriptor = self.resource_type.get_field(name)
            if descriptor is None:
                # the fields argument should have been validated before shaping
                raise InvalidFieldSpecError(
                    f"{self.resource_type.name} has no field {name!r}", status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value
                )
            result.append(descriptor)
        return tuple(result)

    def shape(self, resource: Any, fields: Union[FieldSpec, str, None] = None) -> ShapedResource:
        """
        :param resource: instance of the resource type
        :param fields: comma separated field names or FieldSpec, empty selects all fields
        :return: ShapedResource with the fields in declaration order (all fields) or in the requested order
        """
        return self._shape(resource, self._selected_fields(fields))

    def shape_many(self, resources: Iterable[Any], fields: Union[FieldSpec, str, None] = None) -> Iterator[ShapedResource]:
        """
        Lazily shape `resources`, the fields are resolved before the first item is consumed

        :return: generator yielding one ShapedResource per resource
        """
        descriptors = self._selected_fields(fields)
        return (self._shape(resource, descriptors) for resource in resources)

    @staticmethod
    def _shape(resource: Any, descriptors: Iterable[FieldDescriptor]) -> ShapedResource:
        return ShapedResource((descriptor.name, descriptor.get_value(resource)) for descriptor in descriptors)


def shape(resource_type: ResourceType, resource: Any, fields: Optional[str] = None) -> ShapedResource:
    return ResourceShaper(resource_type).shape(resource, fields)


def shape_many(resource_type: ResourceType, resources: Iterable[Any], fields: Optional[str] = None) -> Iterator[ShapedResource]:
    hypershape.log.debug(f"shaping {resource_type.name} collection, fields: {fields!r}")
    return ResourceShaper(resource_type).shape_many(resources, fields)

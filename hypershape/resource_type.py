# -*- coding: utf-8 -*-
"""Resource type declarations.

A :class:`ResourceType` is the ordered, immutable set of public fields of a resource class.
It is derived once, when the class is registered, so shaping a resource at request time
only iterates over pre-built (name, accessor) pairs.

Supported declarations:
- dataclasses
- pydantic models
- SQLAlchemy mapped classes (column attributes)
- any class with an explicit ``fields`` list
"""

from __future__ import annotations

import dataclasses
import operator
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Type, Union

import sqlalchemy
from pydantic import BaseModel

from .errors import ConfigurationMissingError

FieldDeclaration = Union[str, Tuple[str, Any]]


@dataclass(frozen=True)
class FieldDescriptor:
    """A public field of a resource type"""

    name: str
    type: Any = Any
    accessor: Callable[[Any], Any] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.accessor is None:
            object.__setattr__(self, "accessor", operator.attrgetter(self.name))

    def get_value(self, resource: Any) -> Any:
        return self.accessor(resource)


def _safe_python_type(column: Any) -> Any:
    col_type = getattr(column, "type", None)
    if col_type is None:
        return Any
    try:
        return col_type.python_type
    except NotImplementedError:
        return Any


def _dataclass_fields(cls: Type[Any]) -> list[FieldDescriptor]:
    return [FieldDescriptor(f.name, f.type) for f in dataclasses.fields(cls)]


def _pydantic_fields(cls: Type[BaseModel]) -> list[FieldDescriptor]:
    return [FieldDescriptor(name, info.annotation) for name, info in cls.model_fields.items()]


def _sqlalchemy_fields(mapper: Any) -> list[FieldDescriptor]:
    result = []
    for attr in mapper.column_attrs:
        column = attr.columns[0] if attr.columns else None
        result.append(FieldDescriptor(attr.key, _safe_python_type(column)))
    return result


def _declared_fields(fields: Iterable[FieldDeclaration]) -> list[FieldDescriptor]:
    result = []
    for declaration in fields:
        if isinstance(declaration, FieldDescriptor):
            result.append(declaration)
        elif isinstance(declaration, str):
            result.append(FieldDescriptor(declaration))
        else:
            name, type_ = declaration
            result.append(FieldDescriptor(name, type_))
    return result


class ResourceType:
    """
    Named, ordered set of field descriptors, immutable once created
    """

    __slots__ = ("name", "resource_class", "_fields", "_index")

    def __init__(self, name: str, fields: Sequence[FieldDescriptor], resource_class: Optional[Type[Any]] = None) -> None:
        index: Dict[str, FieldDescriptor] = {}
        for descriptor in fields:
            key = descriptor.name.lower()
            if key in index:
                raise ValueError(f"{name}: field names must be unique (case insensitive), got {descriptor.name!r} twice")
            index[key] = descriptor
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "resource_class", resource_class)
        object.__setattr__(self, "_fields", tuple(fields))
        object.__setattr__(self, "_index", MappingProxyType(index))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __repr__(self) -> str:
        return f"<ResourceType {self.name} {list(self.field_names)}>"

    def __iter__(self):
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    @property
    def fields(self) -> Tuple[FieldDescriptor, ...]:
        """Field descriptors in declaration order"""
        return self._fields

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(descriptor.name for descriptor in self._fields)

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """
        :param name: field name, case insensitive
        :return: the field descriptor or None
        """
        return self._index.get(name.strip().lower())

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    @classmethod
    def from_class(cls, resource_class: Type[Any], name: Optional[str] = None, fields: Optional[Iterable[FieldDeclaration]] = None) -> "ResourceType":
        """
        Derive the resource type from a class declaration

        :param resource_class: dataclass, pydantic model, SQLAlchemy mapped class or plain class
        :param name: resource type name, defaults to the class name
        :param fields: explicit field declarations, names or (name, type) tuples
        :return: ResourceType
        """
        name = name or resource_class.__name__
        if fields is not None:
            descriptors = _declared_fields(fields)
        elif dataclasses.is_dataclass(resource_class):
            descriptors = _dataclass_fields(resource_class)
        elif isinstance(resource_class, type) and issubclass(resource_class, BaseModel):
            descriptors = _pydantic_fields(resource_class)
        else:
            mapper = sqlalchemy.inspect(resource_class, raiseerr=False)
            if mapper is None or not hasattr(mapper, "column_attrs"):
                raise TypeError(f"Can't derive the fields of {resource_class}, provide an explicit fields list")
            descriptors = _sqlalchemy_fields(mapper)
        return cls(name, descriptors, resource_class)


class ResourceTypeRegistry:
    """
    Resource types by class and by name.
    Built at startup and read-only afterwards, `reload` swaps in a complete new snapshot.
    """

    def __init__(self, resource_types: Iterable[ResourceType] = ()) -> None:
        self._types: Mapping[Any, ResourceType] = self._build(resource_types)

    @staticmethod
    def _build(resource_types: Iterable[ResourceType]) -> Mapping[Any, ResourceType]:
        result: Dict[Any, ResourceType] = {}
        for resource_type in resource_types:
            result[resource_type.name] = resource_type
            if resource_type.resource_class is not None:
                result[resource_type.resource_class] = resource_type
        return MappingProxyType(result)

    def register(self, resource_class: Type[Any], name: Optional[str] = None, fields: Optional[Iterable[FieldDeclaration]] = None) -> ResourceType:
        """
        Register a resource class, the new snapshot replaces the current one
        """
        resource_type = ResourceType.from_class(resource_class, name=name, fields=fields)
        current = {rt.name: rt for rt in self._types.values()}
        current[resource_type.name] = resource_type
        self._types = self._build(current.values())
        return resource_type

    def reload(self, resource_types: Iterable[ResourceType]) -> None:
        self._types = self._build(resource_types)

    def get(self, key: Union[str, Type[Any]]) -> ResourceType:
        """
        :param key: resource class or resource type name
        :return: ResourceType
        """
        types = self._types
        try:
            return types[key]
        except KeyError:
            raise ConfigurationMissingError(f"No resource type registered for {key!r}")

    def __contains__(self, key: Any) -> bool:
        return key in self._types

"""
Sort mappings

Clients sort collections with the ``orderBy`` query argument, eg. ``?orderBy=title desc,author``.
The client facing sort keys are those of the resource (eg. ``PostResource``), they are translated
to one or more properties of the persisted entity (eg. ``Post``) using a registered :class:`SortMapping`.

A mapped property may be flagged ``descending``: this reverts the requested direction,
eg. sorting an "age" key ascending is done by sorting a "date_of_birth" property descending.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

import sqlalchemy
import hypershape
from .config import get_config
from .errors import ConfigurationMissingError, InvalidSortKeyError
from .fields import split_csv
from .resource_type import ResourceType


@dataclass(frozen=True)
class SortProperty:
    """An underlying sortable property"""

    path: str
    descending: bool = False


PropertyDeclaration = Union[str, Tuple[str, bool], SortProperty]
MappingDeclaration = Union[PropertyDeclaration, Sequence[PropertyDeclaration]]


def _sort_property(declaration: PropertyDeclaration) -> SortProperty:
    if isinstance(declaration, SortProperty):
        return declaration
    if isinstance(declaration, str):
        return SortProperty(declaration)
    path, descending = declaration
    return SortProperty(path, bool(descending))


def _sort_properties(declaration: MappingDeclaration) -> Tuple[SortProperty, ...]:
    if isinstance(declaration, (str, SortProperty)):
        return (_sort_property(declaration),)
    if isinstance(declaration, tuple) and len(declaration) == 2 and isinstance(declaration[1], bool):
        return (_sort_property(declaration),)
    return tuple(_sort_property(item) for item in declaration)


def parse_order_by(order_by_csv: Optional[str]) -> List[Tuple[str, bool]]:
    """
    Split the orderBy argument in (key, descending) clauses

    :param order_by_csv: eg. "title desc,author"
    :return: eg. [("title", True), ("author", False)]
    :raises InvalidSortKeyError: when a clause has an unknown direction keyword
    """
    desc_keyword = str(get_config("SORT_DESCENDING_KEYWORD")).lower()
    asc_keyword = str(get_config("SORT_ASCENDING_KEYWORD")).lower()
    result = []
    for clause in split_csv(order_by_csv):
        parts = clause.split()
        key = parts[0]
        descending = False
        if len(parts) == 2 and parts[1].lower() in (desc_keyword, asc_keyword):
            descending = parts[1].lower() == desc_keyword
        elif len(parts) != 1:
            raise InvalidSortKeyError(f"Invalid orderBy clause {clause!r}")
        result.append((key, descending))
    return result


class SortMapping:
    """
    Mapping from case insensitive client sort keys to the sortable properties of the destination type
    """

    def __init__(self, source: Type[Any], destination: Type[Any], mappings: Mapping[str, MappingDeclaration]) -> None:
        self.source = source
        self.destination = destination
        self._mappings: Mapping[str, Tuple[SortProperty, ...]] = MappingProxyType(
            {key.strip().lower(): _sort_properties(value) for key, value in mappings.items()}
        )

    def __repr__(self) -> str:
        return f"<SortMapping {getattr(self.source, '__name__', self.source)} -> {getattr(self.destination, '__name__', self.destination)}>"

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(self._mappings)

    def get(self, key: str) -> Optional[Tuple[SortProperty, ...]]:
        return self._mappings.get(key.strip().lower())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def validate(self, order_by_csv: Optional[str]) -> bool:
        """
        :param order_by_csv: the orderBy query argument
        :return: True if all clauses map to a property, empty input is valid
        """
        try:
            clauses = parse_order_by(order_by_csv)
        except InvalidSortKeyError:
            return False
        for key, _ in clauses:
            if key not in self:
                hypershape.log.debug(f"{self} has no sort key {key!r}")
                return False
        return True

    def resolve_clauses(self, order_by_csv: Optional[str]) -> List[Tuple[str, bool]]:
        """
        Translate the orderBy clauses to (property path, descending) pairs

        :raises InvalidSortKeyError: when a key isn't mapped
        """
        result = []
        for key, descending in parse_order_by(order_by_csv):
            properties = self.get(key)
            if properties is None:
                raise InvalidSortKeyError(f"Can't sort by {key!r}")
            for prop in properties:
                # the property flag reverts the requested direction
                result.append((prop.path, descending != prop.descending))
        return result

    def check_destination(self, destination_type: ResourceType) -> None:
        """
        Verify that all mapped properties exist on the destination type

        :raises ConfigurationMissingError:
        """
        for key, properties in self._mappings.items():
            for prop in properties:
                if not destination_type.has_field(prop.path.split(".")[0]):
                    raise ConfigurationMissingError(f"{self}: sort key {key!r} maps to unknown property {prop.path!r}")

    def apply_sort(self, query: Any, order_by_csv: Optional[str], model: Optional[Type[Any]] = None) -> Any:
        """
        Order a SQLAlchemy query (or select statement) or a list

        :param query: sqla query, select statement or list
        :param order_by_csv: the orderBy query argument
        :param model: the mapped class the properties belong to, defaults to the mapping destination
        :return: ordered query or sorted list
        """
        clauses = self.resolve_clauses(order_by_csv)
        if not clauses:
            return query

        if isinstance(query, (list, tuple)):
            result = list(query)
            # stable sort: apply the least significant key first
            for path, descending in reversed(clauses):
                getter = operator.attrgetter(path)
                result.sort(key=lambda obj: (getter(obj) is None, getter(obj)), reverse=descending)
            return result

        model = model or self.destination
        expressions = []
        for path, descending in clauses:
            attr = getattr(model, path, None)
            if attr is None or not hasattr(attr, "desc"):
                raise ConfigurationMissingError(f"{model} has no sortable attribute {path!r}")
            expressions.append(attr.desc() if descending else attr.asc())
        try:
            return query.order_by(*expressions)
        except sqlalchemy.exc.ArgumentError as exc:
            raise ConfigurationMissingError(f"Sort failed for {model}: {exc}")


class SortMappingRegistry:
    """
    Sort mappings by (source, destination) pair.
    Built at startup and read-only afterwards, `reload` swaps in a complete new snapshot.
    """

    def __init__(self, mappings: Iterable[SortMapping] = ()) -> None:
        self._mappings: Mapping[Tuple[Any, Any], SortMapping] = self._build(mappings)

    @staticmethod
    def _build(mappings: Iterable[SortMapping]) -> Mapping[Tuple[Any, Any], SortMapping]:
        result: Dict[Tuple[Any, Any], SortMapping] = {}
        for mapping in mappings:
            try:
                destination_type = ResourceType.from_class(mapping.destination)
            except TypeError:
                hypershape.log.debug(f"Can't verify the properties of {mapping}")
            else:
                mapping.check_destination(destination_type)
            result[(mapping.source, mapping.destination)] = mapping
        return MappingProxyType(result)

    def register(self, source: Type[Any], destination: Type[Any], mappings: Mapping[str, MappingDeclaration]) -> SortMapping:
        """
        :param source: resource class, the sort keys are its field names
        :param destination: entity class holding the sortable properties
        :param mappings: sort key => property path(s)
        :return: SortMapping
        """
        mapping = SortMapping(source, destination, mappings)
        current = dict(self._mappings)
        current[(source, destination)] = mapping
        self._mappings = self._build(current.values())
        return mapping

    def reload(self, mappings: Iterable[SortMapping]) -> None:
        self._mappings = self._build(mappings)

    def resolve(self, source: Type[Any], destination: Type[Any]) -> SortMapping:
        """
        :raises ConfigurationMissingError: when no mapping was registered for the pair
        """
        mappings = self._mappings
        try:
            return mappings[(source, destination)]
        except KeyError:
            raise ConfigurationMissingError(f"No sort mapping registered for {source.__name__} -> {destination.__name__}")

    def validate_mapping_exists(self, source: Type[Any], destination: Type[Any], order_by_csv: Optional[str]) -> bool:
        """
        :param order_by_csv: orderBy query argument, empty or whitespace is valid
        :return: True if all sort keys are mapped for the (source, destination) pair
        """
        if not order_by_csv or not order_by_csv.strip():
            return True
        return self.resolve(source, destination).validate(order_by_csv)


def parse_order_by_param(registry: SortMappingRegistry, source: Type[Any], destination: Type[Any], order_by_csv: Optional[str]) -> Optional[str]:
    """
    Validate the orderBy query argument

    :raises InvalidSortKeyError: when a sort key isn't mapped
    """
    if not registry.validate_mapping_exists(source, destination, order_by_csv):
        raise InvalidSortKeyError(f"Can't sort {source.__name__} by {order_by_csv!r}")
    return order_by_csv


def validate_order_by_param(registry: SortMappingRegistry, source: Type[Any], destination: Type[Any], order_by_csv: Optional[str]) -> bool:
    """
    :return: True if `order_by_csv` only references mapped sort keys
    """
    return registry.validate_mapping_exists(source, destination, order_by_csv)

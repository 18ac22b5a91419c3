"""
Sparse fieldsets: parsing and validation of the ``fields`` query argument

The value of the fields parameter is a comma-separated list that refers to the
name(s) of the fields to be returned, eg. ``?fields=title,author``.
Field names are matched case insensitively against the declared resource fields.
"""

from __future__ import annotations

from typing import Iterator, Optional, Tuple

import hypershape
from .errors import InvalidFieldSpecError
from .resource_type import ResourceType


def split_csv(value: Optional[str]) -> Iterator[str]:
    """
    :param value: comma separated string
    :return: the stripped, non-empty tokens
    """
    if not value:
        return
    for token in value.split(","):
        token = token.strip()
        if token:
            yield token


class FieldSpec:
    """
    Parsed, de-duplicated and case insensitive list of requested field names.
    An empty spec (`FieldSpec.ALL`) selects all fields.
    """

    __slots__ = ("names",)

    ALL: "FieldSpec"

    def __init__(self, names: Tuple[str, ...] = ()) -> None:
        self.names = names

    @classmethod
    def parse(cls, fields_csv: Optional[str]) -> "FieldSpec":
        """
        :param fields_csv: the fields query argument
        :return: FieldSpec, tokens keep the order in which they were first requested
        """
        seen = set()
        names = []
        for token in split_csv(fields_csv):
            key = token.lower()
            if key in seen:
                continue
            seen.add(key)
            names.append(token)
        if not names:
            return cls.ALL
        return cls(tuple(names))

    @property
    def is_all(self) -> bool:
        return not self.names

    def __iter__(self):
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldSpec):
            return NotImplemented
        return tuple(n.lower() for n in self.names) == tuple(n.lower() for n in other.names)

    def __hash__(self) -> int:
        return hash(tuple(n.lower() for n in self.names))

    def __repr__(self) -> str:
        return f"FieldSpec({', '.join(self.names) or '*'})"

    def unknown_fields(self, resource_type: ResourceType) -> list[str]:
        """
        :return: requested field names that aren't declared by `resource_type`
        """
        return [name for name in self.names if not resource_type.has_field(name)]


FieldSpec.ALL = FieldSpec()


def type_has_properties(resource_type: ResourceType, fields_csv: Optional[str]) -> bool:
    """
    Check whether all fields in `fields_csv` are declared by `resource_type`

    :param resource_type: ResourceType
    :param fields_csv: comma separated field names, empty or whitespace means all fields
    :return: boolean
    """
    for token in split_csv(fields_csv):
        if not resource_type.has_field(token):
            hypershape.log.debug(f"{resource_type.name} has no field {token!r}")
            return False
    return True


validate_fields_param = type_has_properties


def parse_fields_param(resource_type: ResourceType, fields_csv: Optional[str]) -> FieldSpec:
    """
    Parse and validate the fields query argument

    :raises InvalidFieldSpecError: when an unknown field is requested
    """
    spec = FieldSpec.parse(fields_csv)
    unknown = spec.unknown_fields(resource_type)
    if unknown:
        raise InvalidFieldSpecError(f"{resource_type.name} has no field(s) {', '.join(unknown)}")
    return spec

# hypershape to json encoding

import dataclasses
import datetime
import decimal
import json
from flask.json.provider import DefaultJSONProvider
from uuid import UUID
import hypershape
from .links import LinkDescriptor, PageMetadata
from typing import Any


class _HyperShapeJSONEncoder:
    """
    JSON encoding for links, paging metadata and common types
    """

    # pylint: disable=too-many-return-statements
    def default(self, obj: Any, **kwargs: Any) -> Any:
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if obj is None:
            return None
        if isinstance(obj, (LinkDescriptor, PageMetadata)):
            return obj.to_dict()
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, datetime.datetime):
            return obj.isoformat()
        if isinstance(obj, (datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset, tuple)):
            return list(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, decimal.Decimal):
            return float(obj)
        if isinstance(obj, bytes):  # pragma: no cover
            return obj.hex()
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        if hasattr(obj, "model_dump"):
            # pydantic models
            return obj.model_dump(mode="json")

        hypershape.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
        return str(obj)


class HyperShapeJSONProvider(_HyperShapeJSONEncoder, DefaultJSONProvider):
    """
    Flask JSON encoding, dict ordering is preserved
    """

    sort_keys = False


class HyperShapeJSONEncoder(_HyperShapeJSONEncoder, json.JSONEncoder):
    """
    Common JSON encoding, used for the pagination header
    """

    pass

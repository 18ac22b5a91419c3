import datetime
import decimal
import json
import uuid

from flask import Flask

from hypershape import HyperShape, HyperShapeJSONEncoder, LinkDescriptor, PageMetadata

from .models import Book, PostResource


def dumps(obj):
    return json.loads(json.dumps(obj, cls=HyperShapeJSONEncoder))


def test_encode_links_and_metadata():
    meta = PageMetadata(page_size=10, page_index=0, total_items_count=3, page_count=1)
    result = dumps({"links": [LinkDescriptor("http://test/1", "self")], "meta": meta})
    assert result["links"] == [{"href": "http://test/1", "rel": "self", "method": "GET"}]
    assert result["meta"]["totalItemsCount"] == 3
    assert result["meta"]["previousPageLink"] is None


def test_encode_common_types():
    value = uuid.UUID("12345678-1234-5678-1234-567812345678")
    result = dumps(
        {
            "when": datetime.datetime(2024, 1, 2, 3, 4, 5),
            "day": datetime.date(2024, 1, 2),
            "took": datetime.timedelta(seconds=90),
            "uuid": value,
            "price": decimal.Decimal("9.5"),
            "tags": {"scifi"},
        }
    )
    assert result == {
        "when": "2024-01-02T03:04:05",
        "day": "2024-01-02",
        "took": "0:01:30",
        "uuid": str(value),
        "price": 9.5,
        "tags": ["scifi"],
    }


def test_encode_models():
    post = PostResource(id=1, title="t", body="b", author="a", updateTime=datetime.datetime(2024, 1, 1))
    assert dumps(post)["updateTime"] == "2024-01-01T00:00:00"
    assert dumps(Book(1, "Dune", "Frank Herbert")) == {"Id": 1, "Title": "Dune", "Author": "Frank Herbert", "Price": None}


def test_unknown_objects_are_stringified():
    class Opaque:
        def __str__(self):
            return "opaque"

    assert dumps([Opaque()]) == ["opaque"]


def test_flask_provider_keeps_key_order():
    app = Flask("json_test")
    HyperShape(app)
    assert app.extensions["hypershape"] is not None
    with app.app_context():
        assert app.json.dumps({"b": 1, "a": LinkDescriptor("http://test/", "self")}) == (
            '{"b": 1, "a": {"href": "http://test/", "rel": "self", "method": "GET"}}'
        )

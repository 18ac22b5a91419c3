import json
from http import HTTPStatus
from urllib.parse import parse_qs, urlparse

import pytest
from flask import Flask

from hypershape import (
    ConfigurationMissingError,
    HyperShape,
    HyperShapeApi,
    QueryParameters,
    QueryRepository,
    ShapedResourceEndpoint,
    SortMapping,
    SortMappingRegistry,
    flask_uri_resolver,
)

from .models import Book, Post, PostResource


def query_args(href):
    return {k: v[0] for k, v in parse_qs(urlparse(href).query).items()}


def pagination(response):
    return json.loads(response.headers["X-Pagination"])


def test_get_collection_first_page(client):
    response = client.get("/api/posts/")
    assert response.status_code == HTTPStatus.OK
    body = response.get_json()

    assert [item["id"] for item in body["value"]] == [1, 2]
    first = body["value"][0]
    assert list(first) == ["id", "title", "body", "author", "updateTime", "links"]
    assert first["updateTime"] == "2024-01-01T00:00:00"
    assert first["links"] == [
        {"href": "http://localhost/api/posts/1", "rel": "self", "method": "GET"},
        {"href": "http://localhost/api/posts/1", "rel": "delete_post", "method": "DELETE"},
    ]

    assert [link["rel"] for link in body["links"]] == ["self", "next_page"]
    assert urlparse(body["links"][0]["href"]).path == "/api/posts/"
    assert query_args(body["links"][0]["href"]) == {"pageIndex": "0", "pageSize": "2"}

    meta = pagination(response)
    next_page_link = meta.pop("nextPageLink")
    assert meta == {
        "pageSize": 2,
        "pageIndex": 0,
        "totalItemsCount": 5,
        "pageCount": 3,
        "previousPageLink": None,
    }
    assert next_page_link.startswith("http://localhost/api/posts/?")
    assert query_args(next_page_link) == {"pageIndex": "1", "pageSize": "2"}


def test_get_collection_shaped_and_sorted(client):
    response = client.get("/api/posts/", query_string={"fields": "title,ID", "orderBy": "author desc,id", "pageIndex": 1})
    assert response.status_code == HTTPStatus.OK
    body = response.get_json()

    assert [item["id"] for item in body["value"]] == [3, 2]
    item = body["value"][0]
    assert list(item) == ["title", "id", "links"]
    assert query_args(item["links"][0]["href"]) == {"fields": "title,ID"}

    assert [link["rel"] for link in body["links"]] == ["self", "previous_page", "next_page"]
    meta = pagination(response)
    assert query_args(meta["previousPageLink"]) == {"pageIndex": "0", "pageSize": "2", "orderBy": "author desc,id", "fields": "title,ID"}
    assert query_args(meta["nextPageLink"])["pageIndex"] == "2"


def test_get_collection_last_page(client):
    response = client.get("/api/posts/?pageIndex=2")
    body = response.get_json()
    assert [item["id"] for item in body["value"]] == [5]
    assert [link["rel"] for link in body["links"]] == ["self", "previous_page"]
    assert pagination(response)["nextPageLink"] is None


def test_get_collection_composite_sort(client):
    response = client.get("/api/posts/?orderBy=byline&pageSize=5&fields=id")
    assert [item["id"] for item in response.get_json()["value"]] == [2, 4, 3, 5, 1]


def test_get_collection_reverted_sort(client):
    response = client.get("/api/posts/?orderBy=updateTime&pageSize=5&fields=id")
    assert [item["id"] for item in response.get_json()["value"]] == [5, 4, 3, 2, 1]


def test_get_collection_without_id_has_no_item_links(client):
    body = client.get("/api/posts/?fields=title").get_json()
    assert body["value"] == [{"title": "Post Title 1"}, {"title": "Post Title 2"}]


@pytest.mark.parametrize(
    "query_string",
    [
        {"orderBy": "unknownKey"},
        {"orderBy": "title sideways"},
        {"fields": "title,bogus"},
        {"pageIndex": "one"},
        {"pageIndex": "-1"},
    ],
)
def test_get_collection_invalid_request(client, query_string):
    response = client.get("/api/posts/", query_string=query_string)
    assert response.status_code == HTTPStatus.BAD_REQUEST
    errors = response.get_json()["errors"]
    assert errors[0]["code"] == "400"


def test_get_item(client):
    response = client.get("/api/posts/5")
    assert response.status_code == HTTPStatus.OK
    body = response.get_json()
    assert body["title"] == "Post Title 5"
    assert body["author"] == "carol"
    assert body["links"] == [
        {"href": "http://localhost/api/posts/5", "rel": "self", "method": "GET"},
        {"href": "http://localhost/api/posts/5", "rel": "delete_post", "method": "DELETE"},
    ]


def test_get_item_shaped(client):
    body = client.get("/api/posts/5?fields=author,Title").get_json()
    assert list(body) == ["author", "title", "links"]
    assert body["links"][0]["href"].startswith("http://localhost/api/posts/5?")
    assert query_args(body["links"][0]["href"]) == {"fields": "author,Title"}


def test_get_missing_item(client):
    response = client.get("/api/posts/99")
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["errors"][0]["code"] == "404"


def test_fields_are_validated_before_the_lookup(client):
    response = client.get("/api/posts/99?fields=bogus")
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "bogus" in response.get_json()["errors"][0]["detail"]


def test_delete_item(client):
    response = client.delete("/api/posts/5")
    assert response.status_code == HTTPStatus.NO_CONTENT
    assert client.get("/api/posts/5").status_code == HTTPStatus.NOT_FOUND
    assert client.delete("/api/posts/5").status_code == HTTPStatus.NOT_FOUND
    assert pagination(client.get("/api/posts/"))["totalItemsCount"] == 4


def test_pagination_header_is_configurable(app, client):
    app.config["PAGINATION_HEADER"] = "X-Page"
    response = client.get("/api/posts/")
    assert "X-Pagination" not in response.headers
    assert json.loads(response.headers["X-Page"])["pageCount"] == 3


def test_endpoint_requires_a_sort_mapping():
    with pytest.raises(ConfigurationMissingError):
        ShapedResourceEndpoint("Book", Book, Post, repository=None, sort_mappings=SortMappingRegistry())


def test_uri_resolver_unknown_route(app):
    with app.test_request_context("/"):
        with pytest.raises(ConfigurationMissingError):
            flask_uri_resolver("getNothing", {})
        assert flask_uri_resolver("getPost", {"id": 3}) == "http://localhost/api/posts/3"


def test_error_handler_for_plain_views():
    app = Flask("plain")
    HyperShape(app)

    @app.route("/plain")
    def plain():
        from hypershape import InvalidSortKeyError

        raise InvalidSortKeyError("Can't sort by 'nope'")

    response = app.test_client().get("/plain")
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json() == {
        "errors": [{"title": "Invalid Sort Key: Can't sort by 'nope'", "detail": "Invalid Sort Key: Can't sort by 'nope'", "code": "400"}]
    }


def test_endpoint_uses_registered_resource_type(sort_mappings):
    endpoint = ShapedResourceEndpoint("Post", PostResource, Post, repository=None, sort_mappings=sort_mappings)
    assert endpoint.collection_route == "getPosts"
    assert endpoint.item_route == "getPost"
    assert endpoint.delete_route == "deletePost"
    assert endpoint.collection_name == "posts"
    assert endpoint.id_field == "id"


def test_blank_order_by_uses_the_default_order(client):
    response = client.get("/api/posts/", query_string={"orderBy": "   ", "fields": " , "})
    assert response.status_code == HTTPStatus.OK
    body = response.get_json()
    assert [item["id"] for item in body["value"]] == [1, 2]
    assert query_args(body["links"][0]["href"]) == {"pageIndex": "0", "pageSize": "2"}
    assert query_args(pagination(response)["nextPageLink"]) == {"pageIndex": "1", "pageSize": "2"}


def test_repository_default_order_for_blank_order_by():
    books = [Book(3, "C", "x"), Book(1, "A", "y"), Book(2, "B", "z")]
    repository = QueryRepository(lambda: list(books), lambda id: None)
    mapping = SortMapping(Book, Book, {"id": "Id"})
    page = repository.get_page(QueryParameters(page_index=0, page_size=3, order_by="   "), mapping)
    assert [book.Id for book in page] == [1, 2, 3]


def test_delete_without_repository_support():
    app = Flask("read_only")
    books = [Book(7, "Dune", "Frank Herbert")]
    sort_mappings = SortMappingRegistry()
    sort_mappings.register(Book, Book, {"id": "Id", "title": "Title"})
    repository = QueryRepository(lambda: list(books), lambda id: next((b for b in books if b.Id == id), None))
    endpoint = ShapedResourceEndpoint("Book", Book, Book, repository, sort_mappings)

    api = HyperShapeApi(app)
    api.expose_resource(endpoint)
    assert api.shaped_endpoints == {"Book": endpoint}
    assert {"getBooks", "getBook", "deleteBook"} <= set(api.endpoints)

    client = app.test_client()
    response = client.delete("/books/7")
    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.get_json()["errors"][0]["code"] == "500"
    assert client.get("/books/7").status_code == HTTPStatus.OK

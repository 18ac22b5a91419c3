import datetime

import pytest
from flask import Flask

from hypershape import (
    HyperShapeApi,
    QueryRepository,
    ResourceType,
    ResourceTypeRegistry,
    ShapedResourceEndpoint,
    SortMappingRegistry,
)

from .models import Book, Post, PostResource, POST_SORT_MAPPING, db, fake_resolver, project_post


@pytest.fixture
def resolver():
    return fake_resolver


@pytest.fixture
def book_type():
    return ResourceType.from_class(Book)


@pytest.fixture
def book():
    return Book(Id=7, Title="Dune", Author="Frank Herbert", Price=9.5)


@pytest.fixture
def sort_mappings():
    registry = SortMappingRegistry()
    registry.register(PostResource, Post, POST_SORT_MAPPING)
    return registry


@pytest.fixture
def app(sort_mappings):
    app = Flask("hypershape_tests")
    app.config.update(
        TESTING=True,
        SQLALCHEMY_DATABASE_URI="sqlite://",
        SERVER_NAME="localhost",
        DEFAULT_PAGE_SIZE=2,
    )
    db.init_app(app)

    resource_types = ResourceTypeRegistry()
    resource_types.register(PostResource, name="Post")

    def delete_post(id):
        post = db.session.get(Post, id)
        if post is None:
            return False
        db.session.delete(post)
        db.session.commit()
        return True

    repository = QueryRepository(
        query_factory=lambda: db.session.query(Post),
        get_by_id=lambda id: db.session.get(Post, id),
        delete=delete_post,
        model=Post,
    )
    endpoint = ShapedResourceEndpoint(
        "Post",
        PostResource,
        Post,
        repository,
        sort_mappings,
        resource_types=resource_types,
        projector=project_post,
    )
    api = HyperShapeApi(app)
    api.expose_resource(endpoint, url_prefix="/api")

    with app.app_context():
        db.create_all()
        authors = ["zhusir", "alice", "bob", "alice", "carol"]
        for i, author in enumerate(authors, start=1):
            db.session.add(
                Post(
                    id=i,
                    title=f"Post Title {i}",
                    body=f"Post Body {i}",
                    author=author,
                    last_modified=datetime.datetime(2024, 1, i),
                )
            )
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()

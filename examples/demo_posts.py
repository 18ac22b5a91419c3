#!/usr/bin/env python
# run:
# $ python demo_posts.py
# try:
# $ curl -i "http://127.0.0.1:5000/api/posts/?pageSize=3&orderBy=updateTime&fields=id,title"
# $ curl -i "http://127.0.0.1:5000/api/books/?orderBy=author,title"
#
import datetime
from dataclasses import dataclass
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from pydantic import BaseModel, ConfigDict
from hypershape import HyperShapeApi, QueryRepository, ResourceTypeRegistry, ShapedResourceEndpoint, SortMappingRegistry

db = SQLAlchemy()


class Post(db.Model):
    """
    description: persisted blog post
    """

    __tablename__ = "Posts"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String, default="")
    body = db.Column(db.String, default="")
    author = db.Column(db.String, default="")
    last_modified = db.Column(db.DateTime, default=datetime.datetime.utcnow)


class PostResource(BaseModel):
    """
    description: the exposed post, `updateTime` is the `last_modified` column
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    body: str
    author: str
    updateTime: datetime.datetime


@dataclass
class Book:
    id: int
    title: str
    author: str


BOOKS = [
    Book(1, "Dune", "Frank Herbert"),
    Book(2, "Foundation", "Isaac Asimov"),
    Book(3, "I, Robot", "Isaac Asimov"),
    Book(4, "Hyperion", "Dan Simmons"),
]


def to_resource(post):
    return PostResource(id=post.id, title=post.title, body=post.body, author=post.author, updateTime=post.last_modified)


def delete_post(id):
    post = db.session.get(Post, id)
    if post is None:
        return False
    db.session.delete(post)
    db.session.commit()
    return True


def delete_book(id):
    for book in BOOKS:
        if book.id == id:
            BOOKS.remove(book)
            return True
    return False


def create_api(app, prefix="/api"):
    resource_types = ResourceTypeRegistry()
    resource_types.register(PostResource, name="Post")
    resource_types.register(Book)

    sort_mappings = SortMappingRegistry()
    sort_mappings.register(
        PostResource,
        Post,
        {"id": "id", "title": "title", "author": "author", "updateTime": ("last_modified", True), "byline": ["author", "title"]},
    )
    sort_mappings.register(Book, Book, {"id": "id", "title": "title", "author": "author"})

    post_repository = QueryRepository(lambda: db.session.query(Post), lambda id: db.session.get(Post, id), delete=delete_post, model=Post)
    book_repository = QueryRepository(
        lambda: list(BOOKS), lambda id: next((book for book in BOOKS if book.id == id), None), delete=delete_book
    )

    api = HyperShapeApi(app)
    api.expose_resource(
        ShapedResourceEndpoint("Post", PostResource, Post, post_repository, sort_mappings, resource_types=resource_types, projector=to_resource),
        url_prefix=prefix,
    )
    api.expose_resource(ShapedResourceEndpoint("Book", Book, Book, book_repository, sort_mappings, resource_types=resource_types), url_prefix=prefix)
    return api


def create_app():
    app = Flask("demo_posts")
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite://", DEFAULT_PAGE_SIZE=5)
    db.init_app(app)
    with app.app_context():
        db.create_all()
        for i in range(12):
            db.session.add(Post(title=f"Post {i}", body=f"Body {i}", author=f"author {i % 3}"))
        db.session.commit()
        create_api(app)
    return app


app = create_app()

if __name__ == "__main__":
    app.run()

# flask_restful API subclass
from http import HTTPStatus
import logging
import werkzeug
from werkzeug.routing import BuildError
from flask_restful import abort, Api, Resource
from flask import url_for
from functools import wraps
import hypershape
from .errors import HyperShapeError, ConfigurationMissingError, error_document
from flask.app import Flask
from typing import Any, Callable, Mapping, Optional, Type


def flask_uri_resolver(route_name: str, params: Mapping[str, Any]) -> str:
    """
    Resolve a route name to an absolute uri with the flask url map

    :param route_name: flask endpoint name
    :param params: url (query) parameters
    :return: absolute uri
    :raises ConfigurationMissingError: if the route isn't registered
    """
    try:
        return url_for(route_name, _external=True, **params)
    except BuildError as exc:
        raise ConfigurationMissingError(f"Can't resolve route {route_name!r}: {exc}")


class HyperShapeApi(Api):
    """
    flask_restful Api that exposes ShapedResourceEndpoint instances
    """

    def __init__(self, app: Optional[Flask] = None, *args, **kwargs) -> None:
        self.shaped_endpoints = {}
        super().__init__(app, *args, **kwargs)

    def init_app(self, app: Flask) -> None:
        # don't add "did you mean" suggestions to the 404 error documents
        app.config.setdefault("ERROR_404_HELP", False)
        if "hypershape" not in app.extensions:
            hypershape.HyperShape(app)
        super().init_app(app)

    def expose_resource(self, endpoint: "hypershape.ShapedResourceEndpoint", url_prefix: str = "") -> None:
        """
        Create the collection, item and delete routes of the endpoint, eg.
        - /posts/ : getPosts
        - /posts/<int:id> : getPost (GET) and deletePost (DELETE)

        :param endpoint: ShapedResourceEndpoint
        :param url_prefix: url prefix, eg. /api
        """
        from .endpoint import ShapedCollectionResource, ShapedItemResource, ShapedDeleteResource

        collection_url = f"{url_prefix}/{endpoint.collection_name}/"
        item_url = f"{url_prefix}/{endpoint.collection_name}/<{endpoint.id_converter}:{endpoint.id_param}>"

        resources = (
            (ShapedCollectionResource, collection_url, endpoint.collection_route),
            (ShapedItemResource, item_url, endpoint.item_route),
            (ShapedDeleteResource, item_url, endpoint.delete_route),
        )
        for base, url, route_name in resources:
            api_class = self._create_resource_class(base, endpoint, route_name)
            hypershape.log.info(f"Exposing {endpoint.name} on {url}, endpoint: {route_name}")
            self.add_resource(api_class, url, endpoint=route_name)
        self.shaped_endpoints[endpoint.name] = endpoint

    @staticmethod
    def _create_resource_class(base: Type[Resource], endpoint: Any, route_name: str) -> Type[Resource]:
        properties = {"endpoint_config": endpoint, "method_decorators": [http_method_decorator]}
        return type(f"{route_name}_API", (base,), properties)


def http_method_decorator(fun: Callable) -> Callable:
    """Decorator for the exposed HTTP methods
    - convert all exceptions to a JSON error document

    :param fun:
    :return: wrapped fun
    """

    @wraps(fun)
    def method_wrapper(*args, **kwargs):
        """Wrap the method and perform error handling
        :param *args:
        :param **kwargs:
        :return: result of the wrapped method
        """
        try:
            return fun(*args, **kwargs)

        except HyperShapeError as exc:
            if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
                hypershape.log.exception(exc)
            errors = error_document(exc)["errors"]
            status_code = exc.status_code

        except werkzeug.exceptions.HTTPException as exc:
            status_code = exc.code
            message = exc.description
            hypershape.log.error(message)
            errors = [dict(title=message, detail=message, code=str(status_code))]

        except Exception as exc:
            hypershape.log.exception(exc)
            status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
            if hypershape.log.getEffectiveLevel() > logging.DEBUG:
                message = "Logging Disabled"
            else:
                message = str(exc)
            errors = [dict(title=message, detail=message, code=str(status_code))]

        abort(status_code, errors=errors)

    return method_wrapper

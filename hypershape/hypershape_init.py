import logging
import os
import sys
from flask import Flask
from .json_encoder import HyperShapeJSONProvider
from .errors import HyperShapeError, error_response
import hypershape
import flask.app
from typing import Any


class HyperShape:
    """This class configures the Flask application to serve shaped resources
    :param app: a Flask application.
    :param LOGLEVEL: loglevel configuration variable, values from logging module (0: trace, .. 50: critical)
    """

    # Configuration settings are stored as class variables
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100
    PAGINATION_HEADER = "X-Pagination"
    SORT_DESCENDING_KEYWORD = "desc"
    SORT_ASCENDING_KEYWORD = "asc"
    DEFAULT_ORDER_BY = "id"
    LOGLEVEL = logging.WARNING

    def __init__(self, app: flask.app.Flask = None, *args, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        if app is not None:
            self.init_app(app, *args, **kwargs)

    def init_app(self, app: flask.app.Flask, json_provider: bool = True, **kwargs: Any) -> None:
        """
        Application initialization: configuration, json encoding and error handlers
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if json_provider:
            app.json_provider_class = HyperShapeJSONProvider
            app.json = HyperShapeJSONProvider(app)

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        # app.config settings take precedence, cfr. get_config
        for conf_name, conf_val in kwargs.items():
            app.config.setdefault(conf_name, conf_val)

        # errors raised from plain flask views, flask-restful resources are handled by http_method_decorator
        app.register_error_handler(HyperShapeError, error_response)
        app.extensions["hypershape"] = self

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        """
        log = logging.getLogger(hypershape.__name__)
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# logging initialization
#
try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = HyperShape.init_logging(LOGLEVEL)

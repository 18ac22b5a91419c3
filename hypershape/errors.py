# Exception Handlers
#
# The application loglevel determines the level of detail shown to the user.
# Client errors (ValidationError and subclasses) always return their message,
# server side errors only show the message when debug logging is enabled.
#
# The exceptions will be caught in http_method_decorator (or the flask error handler) and formatted, for example:
# {
#     "errors": [
#         {
#             "title": "Validation Error: invalid fields 'bogus'",
#             "detail": "Validation Error: invalid fields 'bogus'",
#             "code": "400"
#         }
#     ]
# }
#
import traceback
from flask import jsonify
from werkzeug.exceptions import NotFound
import hypershape
from sqlalchemy.exc import DontWrapMixin
from http import HTTPStatus
from .config import is_debug

HIDDEN_LOG = "(debug logging disabled)"


class HyperShapeError(Exception, DontWrapMixin):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = ""
    api_code = None


class NotFoundError(HyperShapeError, NotFound):
    """
    This exception is raised when an item was not found
    """

    status_code = HTTPStatus.NOT_FOUND.value
    message = "NotFoundError "

    def __init__(self, message="", status_code=HTTPStatus.NOT_FOUND.value, api_code=None):
        """
        :param message: Message to be returned in the (json) body
        :param status_code: HTTP Status code
        :param api_code: API code
        """
        HyperShapeError.__init__(self)
        self.status_code = status_code
        self.api_code = api_code
        hypershape.log.info("Not found: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class ValidationError(HyperShapeError):
    """
    This exception is raised when invalid input has been detected (client side input)
    Always send back the message to the client in the response
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    message = "Validation Error: "

    def __init__(self, message="", status_code=HTTPStatus.BAD_REQUEST.value, api_code=None):
        Exception.__init__(self, message)
        self.status_code = status_code
        self.api_code = api_code
        hypershape.log.warning("%s: %s", self.__class__.__name__, message)
        self.message += message


class InvalidFieldSpecError(ValidationError):
    """
    The fields query argument references a property the resource type doesn't declare
    """

    message = "Invalid Fields: "


class InvalidSortKeyError(ValidationError):
    """
    The orderBy query argument references an unmapped sort key
    """

    message = "Invalid Sort Key: "


class ConfigurationMissingError(HyperShapeError):
    """
    This exception is raised when a sort mapping, resource type or route is not registered.
    This is a deployment defect, not a client error.
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value  # 500
    message = "Configuration Error: "

    def __init__(self, message="", status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value, api_code=None):
        Exception.__init__(self, message)
        self.status_code = status_code
        self.api_code = api_code
        hypershape.log.error("Configuration Error: %s", message)
        if is_debug():
            hypershape.log.debug(traceback.format_exc(120))
            self.message += str(message)
        else:
            self.message += HIDDEN_LOG


def error_document(exc: HyperShapeError) -> dict:
    """
    :param exc: HyperShapeError instance
    :return: jsonapi style error document
    """
    status_code = getattr(exc, "status_code", HTTPStatus.INTERNAL_SERVER_ERROR.value)
    api_code = getattr(exc, "api_code", None) or status_code
    title = getattr(exc, "message", "")
    detail = getattr(exc, "detail", title)
    return {"errors": [dict(title=title, detail=detail, code=str(api_code))]}


def error_response(exc: HyperShapeError):
    """
    Flask error handler for HyperShapeError exceptions raised outside of the HyperShapeApi resources
    """
    return jsonify(error_document(exc)), exc.status_code

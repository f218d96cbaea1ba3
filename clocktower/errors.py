# Exception Handlers
#
# The application loglevel determines the level of detail shown to the user.
# If set to debug, too much sensitive info might be shown !
#
# The exceptions will be caught in http_method_decorator and formatted, for example:
# {
#     "errors": [
#         {
#             "title": "Authorization Error: ",
#             "detail": "Authorization Error: ",
#             "code": "403"
#         }
#     ]
# }
#
from http import HTTPStatus
from werkzeug.exceptions import NotFound
from sqlalchemy.exc import DontWrapMixin
import clocktower
from .config import is_debug

HIDDEN_LOG = "(debug logging disabled)"


class ClocktowerError(Exception, DontWrapMixin):
    """
    Base class for the errors raised by the controllers,
    each error carries the HTTP status code it should be rendered with
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = ""
    api_code = None

    def to_errors(self):
        """
        :return: list of json serializable error objects
        """
        code = self.api_code if self.api_code is not None else self.status_code
        return [dict(title=self.message, detail=self.message, code=str(code))]


class NotFoundError(ClocktowerError, NotFound):
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
        NotFound.__init__(self, message)
        self.status_code = status_code
        self.api_code = api_code
        clocktower.log.error("Not found: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class UnAuthorizedError(ClocktowerError):
    """
    This exception is raised when a policy denies an action
    we use FORBIDDEN(403) instead of UNAUTHORIZED(401): the caller is known, it's just not allowed
    """

    status_code = HTTPStatus.FORBIDDEN.value
    message = "Authorization Error: "

    def __init__(self, message="", status_code=HTTPStatus.FORBIDDEN.value, api_code=None):
        ClocktowerError.__init__(self, message)
        self.status_code = status_code
        self.api_code = api_code
        clocktower.log.error("UnAuthorizedError: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class UnauthorizedMethodCallError(UnAuthorizedError):
    """
    This exception is raised when a controller action is invoked that isn't in the allowed methods
    """

    message = "Unauthorized Method Call: "


class GenericError(ClocktowerError):
    """
    This exception is raised when an error has been detected
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value  # 500
    message = "Generic Error: "

    def __init__(self, message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value, api_code=None):
        ClocktowerError.__init__(self, message)
        self.status_code = status_code
        self.api_code = api_code
        clocktower.log.error("Generic Error: %s", message)
        if is_debug():
            self.message += str(message)
        else:
            self.message += HIDDEN_LOG


class SystemValidationError(ClocktowerError):
    """
    This exception is raised when the server side configuration is invalid,
    e.g. an unsupported validation rule
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = "Validation Error: "

    def __init__(self, message="", status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value, api_code=None):
        ClocktowerError.__init__(self, message)
        self.status_code = status_code
        self.api_code = api_code
        clocktower.log.error("SystemValidationError: %s", message)
        if is_debug():
            self.message += message
        else:
            self.message += HIDDEN_LOG


class ValidationError(ClocktowerError):
    """
    This exception is raised when invalid input has been detected (client side input)
    Always send back the message to the client in the response

    :param errors: field name => list of messages
    """

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY.value
    message = "Validation Error: "

    def __init__(self, message="", errors=None, status_code=HTTPStatus.UNPROCESSABLE_ENTITY.value, api_code=None):
        ClocktowerError.__init__(self, message)
        self.status_code = status_code
        self.api_code = api_code
        self.errors = errors or {}
        clocktower.log.warning("ValidationError: %s %s", message, self.errors)
        self.message += message

    def to_errors(self):
        """
        one error object per field message, the field name is the "source" parameter
        """
        if not self.errors:
            return super().to_errors()

        code = str(self.api_code if self.api_code is not None else self.status_code)
        result = []
        for field_name, messages in self.errors.items():
            if isinstance(messages, dict):
                # nested schema errors, e.g. {"0": ["Not a valid string."]}
                messages = [f"{key}: {value}" for key, value in messages.items()]
            for field_message in messages:
                result.append(dict(title=self.message, detail=field_message, code=code, source={"parameter": field_name}))
        return result

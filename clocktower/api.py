# ClocktowerAPI: expose the controllers on the flask app
#
#     api = ClocktowerAPI(app, prefix="/api")
#     api.expose(BookController, AuthorController)
#
# creates the urls
#     /api/books        GET (index), POST (store)
#     /api/books/<id>   GET (show), PUT and PATCH (update), DELETE (destroy)
#
from http import HTTPStatus
from functools import wraps
import logging
from werkzeug.exceptions import HTTPException
from flask import jsonify, make_response
from flask.app import Flask
from flask_sqlalchemy import SQLAlchemy
import clocktower
from .clocktower_init import CLOCKTOWER
from .errors import ClocktowerError, GenericError
from typing import Callable, Type

COLLECTION_METHODS = ["GET", "POST"]
INSTANCE_METHODS = ["GET", "PUT", "PATCH", "DELETE"]


class ClocktowerAPI:
    """
    Registers the controller url rules on the flask app
    """

    def __init__(self, app: Flask, prefix: str = "", app_db: SQLAlchemy = None, **kwargs) -> None:
        """
        :param app: flask app
        :param prefix: url prefix, e.g. "/api"
        :param app_db: flask_sqlalchemy extension
        :param kwargs: CLOCKTOWER configuration overrides
        """
        self.app = app
        self.prefix = prefix.rstrip("/")
        self.controllers = []
        CLOCKTOWER(app, app_db=app_db, **kwargs)

    def expose_controller(self, controller: Type, url: str = None, endpoint: str = None) -> Type:
        """This method creates the url rules for the controller
        :param controller: APIController subclass
        :param url: collection url, defaults to the model __tablename__
        :param endpoint: flask endpoint name
        :return: the decorated controller class that handles the requests

        creates a class of the form

        @api_decorator
        class BookController_API(BookController):
            pass

        and adds it to /books and /books/<id>
        """
        model = controller.model
        if url is None:
            if model is None:
                raise GenericError(f"Can't expose {controller.__name__} without a model or url")
            url = model.__tablename__
        url = "/" + url.strip("/")
        collection_url = f"{self.prefix}{url}"
        instance_url = f"{collection_url}/<id>"
        if endpoint is None:
            endpoint = f"{controller.__name__}_{collection_url.strip('/').replace('/', '_')}"

        api_class = api_decorator(type(f"{controller.__name__}_API", (controller,), {}))
        view = api_class.as_view(endpoint)

        clocktower.log.info(f"Exposing {controller.__name__} on {collection_url}, endpoint: {endpoint}")
        self.app.add_url_rule(collection_url, view_func=view, methods=COLLECTION_METHODS)
        clocktower.log.info(f"Exposing {controller.__name__} instances on {instance_url}, endpoint: {endpoint}")
        self.app.add_url_rule(instance_url, view_func=view, methods=INSTANCE_METHODS)

        self.controllers.append(api_class)
        return api_class

    def expose(self, *controllers: Type) -> None:
        """
        Expose multiple controllers at once
        """
        for controller in controllers:
            self.expose_controller(controller)


def api_decorator(cls: Type) -> Type:
    """Decorator for the controller views: add generic exception handling to the HTTP methods

    :param cls: APIController subclass
    :return: decorated class
    """
    for method_name in ["get", "post", "put", "patch", "delete"]:
        method = getattr(cls, method_name, None)
        if not method:
            continue
        setattr(cls, method_name, http_method_decorator(method))
    return cls


def http_method_decorator(fun: Callable) -> Callable:
    """Decorator for the HTTP methods (get, post, put, patch, delete)
    - commit the database
    - convert all exceptions to a JSON error response

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
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
        try:
            result = fun(*args, **kwargs)
            clocktower.DB.session.commit()
            return result

        except ClocktowerError as exc:
            # this also catches NotFoundError
            status_code = exc.status_code
            errors = exc.to_errors()

        except HTTPException as exc:
            status_code = exc.code
            message = exc.description
            clocktower.log.error(message)
            errors = [dict(title=message, detail=message, code=str(status_code))]

        except Exception as exc:
            clocktower.log.exception(exc)
            if clocktower.log.getEffectiveLevel() > logging.DEBUG:
                message = "Logging Disabled"
            else:
                message = str(exc)
            errors = [dict(title=message, detail=message, code=str(status_code))]

        clocktower.DB.session.rollback()
        return make_response(jsonify(errors=errors), status_code)

    return method_wrapper

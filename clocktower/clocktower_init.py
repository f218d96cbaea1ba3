import logging
import os
import sys
from flask import Flask
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from .request import ClocktowerRequest
from .json_encoder import ClocktowerJSONProvider
import flask.app


class CLOCKTOWER:
    """This class configures the Flask application to serve clocktower controllers
    :param app: a Flask application.
    :param app_db: the flask_sqlalchemy extension holding the session, defaults to app.extensions["sqlalchemy"]
    :param kwargs: configuration overrides, see the class variables below
    """

    # Configuration settings are stored as class variables
    MAX_PAGE_LIMIT = 100000
    DEFAULT_PAGE_LIMIT = 250
    MAX_PAGE_OFFSET = 2**31
    # actions that require a policy check when a controller doesn't specify its own `policy`
    # empty means no action is authorized unless the controller asks for it
    DEFAULT_POLICY = ()
    INCLUDE_DELIMITER = ","
    LOGLEVEL = logging.WARNING
    cors_domain = None

    def __init__(self, app: flask.app.Flask, *args, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        if app is not None:
            self.init_app(app, *args, **kwargs)

    def init_app(self, app: flask.app.Flask, app_db: SQLAlchemy = None, **kwargs) -> None:
        """
        Application initialization
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if app_db is None:
            app_db = app.extensions["sqlalchemy"]

        import clocktower

        clocktower.DB = self.db = app_db

        app.request_class = ClocktowerRequest
        app.json = ClocktowerJSONProvider(app)
        app.url_map.strict_slashes = False

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        for conf_name, conf_val in kwargs.items():
            setattr(CLOCKTOWER, conf_name, conf_val)

        cors_domain = app.config.get("cors_domain", CLOCKTOWER.cors_domain)
        if cors_domain is not None:
            CORS(app, origins=cors_domain, allow_headers=["Content-Type", "Authorization"], supports_credentials=True)

        # pylint: disable=unused-argument,unused-variable
        @app.teardown_appcontext
        def shutdown_session(exception=None):
            """cfr. http://flask.pocoo.org/docs/0.12/patterns/sqlalchemy/"""
            self.db.session.remove()

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        The webserver will catch stderr so we send everything there
        """
        log = logging.getLogger(__name__)
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# DB and logging initialization
#
DB = SQLAlchemy()

try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = CLOCKTOWER.init_logging(LOGLEVEL)

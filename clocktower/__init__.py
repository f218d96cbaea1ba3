# flake8: noqa: F401
#
# clocktower: CRUD controllers for Flask-SQLAlchemy models
#
from .clocktower_init import DB, log, CLOCKTOWER
from .request import ClocktowerRequest
from .errors import (
    ClocktowerError,
    ValidationError,
    GenericError,
    UnAuthorizedError,
    UnauthorizedMethodCallError,
    NotFoundError,
    SystemValidationError,
)
from .json_encoder import ClocktowerJSONProvider, ClocktowerJSONEncoder
from .base import ClocktowerBase
from .transformer import Transformer, Include
from .fractal import Fractal, fractal, paginate
from .policy import Policy, Gate, gate
from .controller import HasAPIMethods
from .resource import APIController
from .api import ClocktowerAPI
from .validation import validate_data
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "CLOCKTOWER",
    "ClocktowerAPI",
    # controllers:
    "HasAPIMethods",
    "APIController",
    # db:
    "ClocktowerBase",
    # serialization:
    "Transformer",
    "Include",
    "Fractal",
    "fractal",
    "paginate",
    "ClocktowerJSONProvider",
    "ClocktowerJSONEncoder",
    # authorization:
    "Policy",
    "Gate",
    "gate",
    # validation:
    "validate_data",
    # Errors:
    "ClocktowerError",
    "ValidationError",
    "GenericError",
    "UnAuthorizedError",
    "UnauthorizedMethodCallError",
    "NotFoundError",
    "SystemValidationError",
    # request
    "ClocktowerRequest",
)

# clocktower to json encoding

import datetime
import decimal
import json
from uuid import UUID
from flask.json.provider import DefaultJSONProvider
import clocktower
from .base import ClocktowerBase


class _ClocktowerJSONEncoder:
    """
    JSON encoding for the values returned by the controllers (model instances and common types)
    """

    # pylint: disable=too-many-return-statements,arguments-differ,method-hidden
    def default(self, obj, **kwargs):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if obj is None:
            return None
        if isinstance(obj, ClocktowerBase):
            # a model instance was returned without a transformer
            return obj.to_dict()
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, datetime.datetime):
            return obj.isoformat(" ")
        if isinstance(obj, (datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, set):
            return list(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, decimal.Decimal):
            return float(obj)
        if isinstance(obj, bytes):
            if obj == b"":
                return ""
            clocktower.log.debug("ClocktowerJSONEncoder: serializing bytes obj")
            return obj.hex()

        clocktower.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class ClocktowerJSONProvider(_ClocktowerJSONEncoder, DefaultJSONProvider):
    """
    Flask JSON encoding
    """


class ClocktowerJSONEncoder(_ClocktowerJSONEncoder, json.JSONEncoder):
    """
    Common JSON encoding, e.g. json.dumps(data, cls=ClocktowerJSONEncoder)
    """

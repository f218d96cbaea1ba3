#  APIController binds the HTTP methods of a flask MethodView to the controller actions:
#
#  GET    /books          => index
#  GET    /books/<id>     => show
#  POST   /books          => store
#  PUT    /books/<id>     => update
#  PATCH  /books/<id>     => update
#  DELETE /books/<id>     => destroy
#
# pylint: disable=redefined-builtin
from http import HTTPStatus
from flask import jsonify, make_response
from flask.views import MethodView
from .controller import HasAPIMethods
from .errors import ValidationError


class APIController(HasAPIMethods, MethodView):
    """
    Superclass for the exposed controllers, a new controller instance is created for every request
    """

    def get(self, id=None):
        """
        HTTP GET: return instances
        If no id is given: return all instances
        If an id is given, get an instance by id
        """
        if id is None:
            result = self.call_action("index")
        else:
            result = self.call_action("show", [self.attributes])
        return jsonify(result)

    def post(self, id=None):
        """
        HTTP POST: create an instance, the response has status 201
        """
        if id is not None:
            # POSTing to an instance isn't allowed
            raise ValidationError(f"POSTing to instance is not allowed {self}", status_code=HTTPStatus.METHOD_NOT_ALLOWED.value)
        result = self.call_action("store", [self.attributes])
        return make_response(jsonify(result), HTTPStatus.CREATED)

    def put(self, id=None):
        """
        HTTP PUT: update the instance
        """
        if id is None:
            raise ValidationError("Invalid ID", status_code=HTTPStatus.METHOD_NOT_ALLOWED.value)
        result = self.call_action("update", [self.attributes])
        return jsonify(result)

    patch = put

    def delete(self, id=None):
        """
        HTTP DELETE: delete the instance
        """
        if id is None:
            # This endpoint shouldn't be exposed so this code is not reachable
            raise ValidationError("", status_code=HTTPStatus.METHOD_NOT_ALLOWED.value)
        result = self.call_action("destroy", [self.attributes])
        return jsonify(result)

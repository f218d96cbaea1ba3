# HasAPIMethods: generic CRUD actions for controllers
#
# A controller declares the model it serves and how the instances are transformed:
#
#     class BookController(APIController):
#         model = Book
#         transformer = BookTransformer
#         policy = ("update", "delete")
#         validation_rules = {"title": "required|string|max:255"}
#
# The actions (index, show, store, update, destroy) are invoked with `call_action`,
# which only runs the actions in `get_allowed_methods()`.
#
# Hooks: override these methods in the controller to customize the actions
# - get_index_collection_scope(): the collection returned by index
# - get_index_transformer(): transformer used by index
# - get_show_item_scope(request): the instance returned by show and update
# - get_store_transformer(): transformer used by store
# - store_after_fill(model), store_after_save(model, request)
# - update_after_fill(model), update_after_save(model, request)
#
from flask import has_request_context, request as flask_request
import clocktower
from .config import get_config
from .errors import UnauthorizedMethodCallError, GenericError
from .fractal import fractal
from .policy import gate as default_gate

# controller attributes that can be passed to the constructor
CONFIG_OPTIONS = (
    "model",
    "transformer",
    "allowed_methods",
    "includes",
    "index_includes",
    "show_includes",
    "policy",
    "gate",
    "validation_rules",
    "validation_messages",
    "store_validation_rules",
    "store_validation_messages",
    "update_validation_rules",
    "update_validation_messages",
)


def _merge_includes(*include_lists):
    """
    :return: ordered union of the include lists
    """
    result = []
    for includes in include_lists:
        if isinstance(includes, str):
            includes = [includes]
        for include in includes or []:
            if include not in result:
                result.append(include)
    return result


class HasAPIMethods:
    """
    Controller mixin implementing the CRUD actions

    model: ClocktowerBase model class
    transformer: Transformer class, marshmallow schema or callable, None uses `model.to_dict()`
    allowed_methods: names of the actions that may be called, empty means all PROTECTED_METHODS
    includes: relationships included by all actions (the request "include" argument is added)
    index_includes, show_includes: relationships included by index and show/update
    policy: abilities that have to be authorized ("index", "view", "create", "update", "delete"),
            None uses the DEFAULT_POLICY configuration option
    gate: the policy Gate, None uses `clocktower.policy.gate`
    """

    PROTECTED_METHODS = ("index", "show", "store", "update", "destroy")

    model = None
    transformer = None
    allowed_methods = ()
    includes = ()
    index_includes = ()
    show_includes = ()
    policy = None
    gate = None

    # rules shared by store and update
    validation_rules = {}
    validation_messages = {}
    store_validation_rules = {}
    store_validation_messages = {}
    update_validation_rules = {}
    update_validation_messages = {}

    def __init__(self, request=None, **config):
        """
        :param request: the request to handle, defaults to the current flask request
        :param config: overrides of the controller attributes, e.g. `model=Book`
        """
        for option, value in config.items():
            if option not in CONFIG_OPTIONS:
                raise TypeError(f'{self.__class__.__name__} got an unexpected configuration option "{option}"')
            setattr(self, option, value)

        if request is None and has_request_context():
            request = flask_request._get_current_object()
        self.attributes = request

    #
    # Action dispatch
    #
    def call_action(self, method, parameters=()):
        """
        Execute an action on the controller

        :param method: action name
        :param parameters: positional arguments for the action
        :return: the action result
        """
        action = getattr(self, method, None) if isinstance(method, str) else None
        if method not in self.get_allowed_methods() or not callable(action):
            clocktower.log.warning(f"Method [{method}] is not authorized to run on [{self.__class__.__name__}]")
            raise UnauthorizedMethodCallError(f"Method [{method}] is not authorized to run on [{self.__class__.__name__}].")
        return action(*parameters)

    #
    # Actions
    #
    def index(self):
        """
        :return: the (transformed) collection
        """
        if self.get_policy("index"):
            self.authorize("index", self.get_model())

        return self.return_index(
            self.get_index_collection_scope(),
            self.get_index_transformer(),
            self.get_index_includes(),
        )

    def return_index(self, collection, transformer, includes=()):
        """
        Transform the index collection, a page of the collection is returned when
        the client requested one
        """
        resource = fractal().collection(collection).transform_with(transformer).parse_includes(includes)
        request = self.attributes
        if getattr(request, "is_paginated", False):
            resource.paginate(request.page_offset, request.page_limit)
        return resource.to_dict()

    def show(self, request=None):
        """
        :param request: request with the id of the instance
        :return: the transformed instance
        """
        request = self._get_request(request)
        item = self.get_show_item_scope(request)
        if self.get_policy("view"):
            self.authorize("view", item)

        return fractal().item(item).transform_with(self.get_transformer()).parse_includes(self.get_show_includes()).to_dict()

    def store(self, request=None):
        """
        Create a new instance from the request input

        :return: {"created": True, "data": ...}
        """
        request = self._get_request(request)
        if self.get_policy("create"):
            self.authorize("create", self.get_model())

        request.validate(
            {**self.validation_rules, **self.store_validation_rules},
            {**self.validation_messages, **self.store_validation_messages},
        )

        model = self.get_model()()
        model.fill(request.input())
        self.store_after_fill(model)
        model.save()
        self.store_after_save(model, request)

        result = fractal().item(model.fresh()).transform_with(self.get_store_transformer()).to_dict()
        return dict({"created": True}, **result)

    def update(self, request=None):
        """
        Update the instance with the request input, the request is validated before the
        instance is looked up and authorized

        :return: the transformed show item
        """
        request = self._get_request(request)
        request.validate(
            {**self.validation_rules, **self.update_validation_rules},
            {**self.validation_messages, **self.update_validation_messages},
        )

        instance = self.get_model().find_or_fail(request.id)
        if self.get_policy("update"):
            self.authorize("update", instance)

        instance.fill(request.input())
        self.update_after_fill(instance)
        instance.save()
        self.update_after_save(instance, request)

        return fractal().item(self.get_show_item_scope(request)).transform_with(self.get_transformer()).parse_includes(self.get_show_includes()).to_dict()

    def destroy(self, request=None):
        """
        Delete the instance

        :return: {"deleted": True}
        """
        request = self._get_request(request)
        instance = self.get_model().find_or_fail(request.id)
        if self.get_policy("delete"):
            self.authorize("delete", instance)

        self.get_model().destroy(instance.get_key())
        return {"deleted": True}

    def _get_request(self, request):
        return self.attributes if request is None else request

    #
    # Authorization
    #
    def get_gate(self):
        return default_gate if self.gate is None else self.gate

    def authorize(self, ability, target):
        """
        :param ability: policy ability, e.g. "view"
        :param target: model class or instance
        :raises UnAuthorizedError: when the ability is denied
        """
        return self.get_gate().authorize(ability, target)

    def get_policy(self, key):
        """
        :param key: ability name
        :return: True if the ability has to be authorized
        """
        policy = self.policy
        if policy is None:
            policy = get_config("DEFAULT_POLICY") or ()
        if isinstance(policy, str):
            # e.g. DEFAULT_POLICY="update,delete" from the environment
            policy = [ability.strip() for ability in policy.split(",")]
        return key in policy

    #
    # Getters and setters
    #
    def get_model(self):
        if self.model is None:
            raise GenericError(f"No model configured for {self.__class__.__name__}")
        return self.model

    def set_model(self, model):
        self.model = model
        return self

    def get_transformer(self):
        return self.transformer

    def set_transformer(self, transformer):
        self.transformer = transformer
        return self

    def get_allowed_methods(self):
        """
        :return: the configured allowed methods, or the protected methods if none are configured
        """
        if not self.allowed_methods:
            return self.get_protected_methods()
        return list(self.allowed_methods)

    def set_allowed_methods(self, allowed_methods):
        self.allowed_methods = allowed_methods
        return self

    def get_protected_methods(self):
        return list(self.PROTECTED_METHODS)

    def get_includes(self):
        """
        :return: the configured includes and the includes requested by the client
        """
        return _merge_includes(self.includes, getattr(self.attributes, "includes", None))

    def get_index_includes(self):
        return _merge_includes(self.index_includes, self.get_includes())

    def set_index_includes(self, includes):
        self.index_includes = includes
        return self

    def get_show_includes(self):
        return _merge_includes(self.show_includes, self.get_includes())

    def set_show_includes(self, includes):
        self.show_includes = includes
        return self

    #
    # Hooks
    #
    def get_index_collection_scope(self):
        """
        :return: the collection returned by index, all instances by default
        """
        return self.get_model()._s_query()

    def get_index_transformer(self):
        return self.get_transformer()

    def get_show_item_scope(self, request):
        """
        :return: the instance returned by show and update
        """
        return self.get_model().find_or_fail(request.id)

    def get_store_transformer(self):
        return self.get_transformer()

    def store_after_fill(self, model):
        pass

    def store_after_save(self, model, request):
        pass

    def update_after_fill(self, model):
        pass

    def update_after_save(self, model, request):
        pass

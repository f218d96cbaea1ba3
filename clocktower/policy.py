# Authorization policies
#
# A policy class holds the authorization rules for a model, one method per ability:
#
#     @gate.policy(Book)
#     class BookPolicy(Policy):
#         def view(self, user, book):
#             return True
#
#         def update(self, user, book):
#             return user is not None and book.owner_id == user.id
#
# The controllers call `gate.authorize(ability, target)` for the abilities listed in their `policy`,
# target is either a model instance or (for "index" and "create") the model class.
#
from flask import g, has_app_context
import clocktower
from .errors import UnAuthorizedError


class Policy:
    """
    Base class for the model policies

    `before(user, ability, target)` is called before the ability method,
    when it returns a value other than None that value is used as the result
    """

    def before(self, user, ability, target):
        return None


def default_user_resolver():
    """
    :return: the authenticated user, as set in flask.g by the authentication layer
    """
    if not has_app_context():
        return None
    return getattr(g, "user", None)


class Gate:
    """
    Maps model classes to their policy and checks abilities
    """

    def __init__(self, user_resolver=None):
        """
        :param user_resolver: callable returning the current user
        """
        self.policies = {}
        self.user_resolver = user_resolver or default_user_resolver

    def policy(self, model, policy_cls=None):
        """
        Register the policy for `model`, can be used as a class decorator

        :param model: model class
        :param policy_cls: Policy class (or instance)
        """
        if policy_cls is None:

            def register(cls):
                self.policy(model, cls)
                return cls

            return register

        self.policies[model] = policy_cls
        clocktower.log.debug(f"Registered policy {policy_cls} for {model}")
        return policy_cls

    def get_policy_for(self, target):
        """
        :param target: model class or instance
        :return: Policy instance or None
        """
        model = target if isinstance(target, type) else type(target)
        for cls in model.__mro__:
            policy = self.policies.get(cls)
            if policy is not None:
                return policy() if isinstance(policy, type) else policy
        return None

    def allows(self, ability, target, user=None):
        """
        :param ability: policy method name, e.g. "view"
        :param target: model class or instance
        :param user: user to check, defaults to the resolved current user
        :return: boolean
        """
        if user is None:
            user = self.user_resolver()
        policy = self.get_policy_for(target)
        if policy is None:
            clocktower.log.warning(f"No policy defined for {target}")
            return False

        before = policy.before(user, ability, target) if hasattr(policy, "before") else None
        if before is not None:
            return bool(before)

        method = getattr(policy, ability, None)
        if not callable(method):
            clocktower.log.warning(f'Policy {policy.__class__.__name__} has no "{ability}" method')
            return False
        return bool(method(user, target))

    def denies(self, ability, target, user=None):
        return not self.allows(ability, target, user)

    def authorize(self, ability, target, user=None):
        """
        :raises UnAuthorizedError: when the ability is denied
        """
        if self.allows(ability, target, user):
            return True
        name = target.__name__ if isinstance(target, type) else type(target).__name__
        clocktower.log.warning(f'Denied "{ability}" on {name}')
        raise UnAuthorizedError(f'"{ability}" not allowed on {name}')


gate = Gate()

"""
Request class used by the clocktower controllers

Parses the query arguments the controllers use:
- include: comma separated names of the relationships to include
- page[offset], page[limit] (or page[number], page[size]): index pagination

and gives access to the merged request input (query args, form fields and json body)
"""
from flask import Request
from werkzeug.utils import cached_property
import clocktower
from .config import get_config, get_int_config
from .errors import ValidationError
from .validation import validate_data


# pylint: disable=too-many-ancestors
class ClocktowerRequest(Request):
    """
    Flask request with some helpers for the controllers
    """

    @cached_property
    def includes(self):
        """
        :return: the relationship names requested with the "include" query argument
        """
        return self.parse_includes()

    def parse_includes(self):
        """
        parse the "include" query argument
        """
        delimiter = get_config("INCLUDE_DELIMITER") or ","
        include_arg = self.args.get("include", "")
        includes = []
        for include in include_arg.split(delimiter):
            include = include.strip()
            if include and include not in includes:
                includes.append(include)
        return includes

    @property
    def is_paginated(self):
        """
        :return: True if the client requested a page of the collection
        """
        return any(arg in self.args for arg in ("page[offset]", "page[limit]", "page[number]", "page[size]"))

    @property
    def page_offset(self):
        """
        :return: page offset requested by the client when fetching lists

        If the client uses page[number] instead of page[offset], then we transform the
        number parameter to an offset
        """
        page_offset = self.args.get("page[offset]", 0, type=int)
        if page_offset == 0 and "page[number]" in self.args and "page[size]" in self.args:
            page_size = self.args.get("page[size]", 0, type=int)
            page_number = self.args.get("page[number]", 1, type=int) - 1
            page_offset = page_number * page_size
        return min(max(page_offset, 0), get_int_config("MAX_PAGE_OFFSET"))

    @property
    def page_limit(self):
        """
        :return: page size requested by the client, clamped to MAX_PAGE_LIMIT
        """
        default_limit = get_int_config("DEFAULT_PAGE_LIMIT")
        page_limit = self.args.get("page[limit]", default_limit, type=int)
        if "page[number]" in self.args and "page[size]" in self.args:
            page_limit = self.args.get("page[size]", default_limit, type=int)
        if page_limit <= 0:
            page_limit = default_limit
        return min(page_limit, get_int_config("MAX_PAGE_LIMIT"))

    def get_json_payload(self):
        """
        :return: the json body of the request, an empty dict if there is none
        """
        if not self.is_json:
            return {}
        result = self.get_json(silent=True)
        if result is None and self.get_data():
            raise ValidationError("Invalid JSON Payload")
        if result is None:
            return {}
        if not isinstance(result, dict):
            raise ValidationError(f"Invalid JSON Payload : {result}")
        return result

    def input(self, key=None, default=None):
        """
        :param key: input field name
        :param default: returned when the field isn't in the input
        :return: the merged request input (query args, form fields and json body), or the value of `key`
        """
        result = self.args.to_dict()
        result.update(self.form.to_dict())
        result.update(self.get_json_payload())
        if key is None:
            return result
        return result.get(key, default)

    def all(self):
        return self.input()

    @property
    def id(self):
        """
        :return: the id of the requested resource, from the url or the input
        """
        view_args = self.view_args or {}
        if view_args.get("id") is not None:
            return view_args["id"]
        return self.input("id")

    def validate(self, rules, messages=None):
        """
        Validate the request input

        :param rules: field name => rules
        :param messages: custom error messages
        :return: the validated fields
        """
        clocktower.log.debug(f"Validating {self.method} {self.path} input")
        return validate_data(self.input(), rules, messages)

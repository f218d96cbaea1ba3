# Request validation
#
# Validation rules are declared per field as "|" separated rule strings (or lists of rules):
#
#     validation_rules = {
#         "name": "required|string|max:255",
#         "email": ["required", "email"],
#         "age": "nullable|integer|between:18,99",
#     }
#
# The rules are translated to a marshmallow schema that is loaded with the request input.
# Custom messages are looked up as "field.rule" first, then "rule":
#
#     validation_messages = {"name.required": "A :attribute is needed", "max": ":attribute is too long"}
#
import datetime
import marshmallow
from marshmallow import fields, validate, EXCLUDE
from .errors import ValidationError, SystemValidationError

# type rules => marshmallow field classes
TYPE_RULES = {
    "string": fields.String,
    "integer": fields.Integer,
    "int": fields.Integer,
    "numeric": fields.Float,
    "boolean": fields.Boolean,
    "bool": fields.Boolean,
    "array": fields.List,
    "email": fields.Email,
    "url": fields.Url,
    "uuid": fields.UUID,
    "date": fields.Raw,
}
# when several type rules are given (eg. "string|email") the most specific one is used
TYPE_PRIORITY = ("email", "url", "uuid", "date", "array", "boolean", "bool", "integer", "int", "numeric", "string")
NUMERIC_RULES = ("integer", "int", "numeric")
# rules that don't need a validator, they only toggle field options
MODIFIER_RULES = ("required", "nullable", "sometimes", "confirmed")


class In(validate.OneOf):
    """
    OneOf validator comparing the string representation of the value,
    rule arguments are always strings
    """

    def __call__(self, value):
        if str(value) not in self.choices:
            raise marshmallow.ValidationError(self._format_error(value))
        return value


class NotIn(validate.NoneOf):
    """
    NoneOf validator comparing the string representation of the value
    """

    def __call__(self, value):
        if str(value) in self.iterable:
            raise marshmallow.ValidationError(self._format_error(value))
        return value


class Filled(validate.Validator):
    """
    "required" also rejects empty strings and empty lists
    """

    default_message = "Field may not be empty."

    def __init__(self, error=None):
        self.error = error or self.default_message

    def _repr_args(self):
        return ""

    def __call__(self, value):
        if value in ("", [], {}) or (isinstance(value, str) and not value.strip()):
            raise marshmallow.ValidationError(self.error)
        return value


class IsDate(validate.Validator):
    """
    ISO 8601 date or datetime
    """

    default_message = "Not a valid date."

    def __init__(self, error=None):
        self.error = error or self.default_message

    def _repr_args(self):
        return ""

    def __call__(self, value):
        try:
            datetime.datetime.fromisoformat(str(value))
        except ValueError:
            raise marshmallow.ValidationError(self.error)
        return value


class Size(validate.Length):
    """
    Length validator, values without a length (numbers, booleans) are measured
    by the length of their string representation
    """

    def __call__(self, value):
        if isinstance(value, (str, bytes, list, tuple, dict, set)):
            return super().__call__(value)
        super().__call__(str(value))
        return value


def parse_rules(rules):
    """
    :param rules: "required|max:255" or ["required", "max:255"]
    :return: list of (rule name, [arguments]) tuples
    """
    if isinstance(rules, str):
        rules = rules.split("|")
    result = []
    for rule in rules:
        rule = rule.strip()
        if not rule:
            continue
        name, _, args = rule.partition(":")
        name = name.strip().lower()
        if name == "regex":
            # the pattern may contain "," and "|"
            result.append((name, [args]))
        else:
            result.append((name, [arg.strip() for arg in args.split(",")] if args else []))
    return result


def get_message(messages, field_name, rule_name, escape=True, **params):
    """
    :param messages: custom messages, keyed by "field.rule" or "rule"
    :param escape: escape the braces, for the messages marshmallow formats itself
    :return: the formatted custom message or None
    """
    message = messages.get(f"{field_name}.{rule_name}", messages.get(rule_name))
    if message is None:
        return None
    params["attribute"] = field_name.replace("_", " ")
    for key, value in params.items():
        message = message.replace(f":{key}", str(value))
    if not escape:
        return message
    # marshmallow formats error messages with str.format
    return message.replace("{", "{{").replace("}", "}}")


def _number(value, rule_name, field_name):
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        raise SystemValidationError(f'Invalid argument "{value}" for rule "{rule_name}" of "{field_name}"')


def build_field(field_name, rules, messages=None):
    """
    Create the marshmallow field for the given rules

    :param field_name: request field name
    :param rules: rule string or list
    :param messages: custom messages
    :return: marshmallow field
    """
    messages = messages or {}
    parsed = parse_rules(rules)
    names = [name for name, _ in parsed]
    for name in names:
        if name not in TYPE_RULES and name not in MODIFIER_RULES and name not in VALIDATOR_RULES:
            raise SystemValidationError(f'Unsupported validation rule "{name}" for "{field_name}"')

    type_rule = next((name for name in TYPE_PRIORITY if name in names), None)
    is_numeric = type_rule in NUMERIC_RULES
    required = "required" in names

    validators = []
    if required:
        validators.append(Filled(error=get_message(messages, field_name, "required", escape=False)))
    for name, args in parsed:
        if name in VALIDATOR_RULES and name not in ("alpha", "alpha_num") and not args:
            raise SystemValidationError(f'Validation rule "{name}" of "{field_name}" needs an argument')
        if name in VALIDATOR_RULES:
            validators.append(VALIDATOR_RULES[name](field_name, args, messages, is_numeric))
    if type_rule == "date":
        validators.append(IsDate(error=get_message(messages, field_name, "date", escape=False)))

    error_messages = {}
    required_message = get_message(messages, field_name, "required")
    if required_message:
        error_messages["required"] = required_message
        error_messages["null"] = required_message
    if type_rule:
        type_message = get_message(messages, field_name, type_rule)
        if type_message:
            error_messages["invalid"] = type_message

    kwargs = dict(
        required=required,
        allow_none="nullable" in names,
        validate=validators,
        error_messages=error_messages,
    )
    field_cls = TYPE_RULES.get(type_rule, fields.Raw)
    if field_cls is fields.List:
        return fields.List(fields.Raw(), **kwargs)
    return field_cls(**kwargs)


def _size_validator(rule_name, field_name, messages, is_numeric, min=None, max=None, equal=None):
    """
    min/max/size/between validate the value of numbers and the length of strings and lists
    """
    params = {"min": min, "max": max, "size": equal}
    error = get_message(messages, field_name, rule_name, **{k: v for k, v in params.items() if v is not None})
    if is_numeric:
        if equal is not None:
            min = max = equal
        return validate.Range(min=min, max=max, error=error)
    return Size(min=min, max=max, equal=equal, error=error)


def _min(field_name, args, messages, is_numeric):
    return _size_validator("min", field_name, messages, is_numeric, min=_number(args[0], "min", field_name))


def _max(field_name, args, messages, is_numeric):
    return _size_validator("max", field_name, messages, is_numeric, max=_number(args[0], "max", field_name))


def _size(field_name, args, messages, is_numeric):
    return _size_validator("size", field_name, messages, is_numeric, equal=_number(args[0], "size", field_name))


def _between(field_name, args, messages, is_numeric):
    if len(args) != 2:
        raise SystemValidationError(f'"between" needs two arguments for "{field_name}"')
    low, high = (_number(arg, "between", field_name) for arg in args)
    return _size_validator("between", field_name, messages, is_numeric, min=low, max=high)


def _in(field_name, args, messages, is_numeric):
    return In(args, error=get_message(messages, field_name, "in", values=", ".join(args)))


def _not_in(field_name, args, messages, is_numeric):
    return NotIn(args, error=get_message(messages, field_name, "not_in", values=", ".join(args)))


def _regex(field_name, args, messages, is_numeric):
    pattern = args[0]
    if len(pattern) > 1 and pattern.startswith("/") and pattern.endswith("/"):
        # strip the delimiters, e.g. "/^[a-z]+$/"
        pattern = pattern[1:-1]
    return validate.Regexp(pattern, error=get_message(messages, field_name, "regex"))


def _alpha(field_name, args, messages, is_numeric):
    return validate.Regexp(r"^[^\W\d_]+$", error=get_message(messages, field_name, "alpha") or "Must contain only letters.")


def _alpha_num(field_name, args, messages, is_numeric):
    return validate.Regexp(r"^[^\W_]+$", error=get_message(messages, field_name, "alpha_num") or "Must contain only letters and numbers.")


VALIDATOR_RULES = {
    "min": _min,
    "max": _max,
    "size": _size,
    "between": _between,
    "in": _in,
    "not_in": _not_in,
    "regex": _regex,
    "alpha": _alpha,
    "alpha_num": _alpha_num,
}


def build_schema(rules, messages=None, name="RequestSchema"):
    """
    :param rules: field name => rules
    :param messages: custom messages
    :return: marshmallow Schema class
    """
    schema_fields = {field_name: build_field(field_name, field_rules, messages) for field_name, field_rules in rules.items()}
    return marshmallow.Schema.from_dict(schema_fields, name=name)


def check_confirmed(data, rules, messages):
    """
    "confirmed" fields must be repeated in a "<field>_confirmation" field

    :return: field name => messages
    """
    errors = {}
    for field_name, field_rules in rules.items():
        if "confirmed" not in [name for name, _ in parse_rules(field_rules)]:
            continue
        if field_name in data and data.get(f"{field_name}_confirmation") != data[field_name]:
            message = get_message(messages or {}, field_name, "confirmed", escape=False) or "Confirmation does not match."
            errors[field_name] = [message]
    return errors


def validate_data(data, rules, messages=None):
    """
    Validate `data` against `rules`

    :param data: dictionary, eg. the request input
    :param rules: field name => rules
    :param messages: custom messages
    :return: the validated (deserialized) fields
    """
    if not rules:
        return {}
    schema = build_schema(rules, messages)(unknown=EXCLUDE)
    errors = {}
    result = {}
    try:
        result = schema.load(data)
    except marshmallow.ValidationError as exc:
        errors.update(exc.messages)

    for field_name, field_errors in check_confirmed(data, rules, messages).items():
        errors.setdefault(field_name, []).extend(field_errors)

    if errors:
        raise ValidationError("The given data was invalid.", errors=errors)
    return result

import datetime
import clocktower
import sqlalchemy
from .errors import ValidationError

TRUE_STRINGS = ("1", "true", "on", "yes")
FALSE_STRINGS = ("0", "false", "off", "no", "")


def parse_attr(column, attr_val):
    """
    Parse the supplied `attr_val` so it can be saved in the SQLAlchemy `column`

    :param column: SQLAlchemy column
    :param attr_val: request value (json, form or url argument)
    :return: processed value
    """
    if attr_val is None:
        return attr_val

    try:
        python_type = column.type.python_type
    except NotImplementedError as exc:
        """
        This happens when a custom type has been implemented, in which case the user/dev should know how to handle it:
        => simply return the attr_val for user-defined classes
        """
        clocktower.log.debug(exc)
        return attr_val

    # skip type coercion on JSON columns, since they could be anything
    if isinstance(column.type, sqlalchemy.types.JSON):
        return attr_val

    if isinstance(attr_val, python_type) and not (python_type is datetime.date and isinstance(attr_val, datetime.datetime)):
        return attr_val

    try:
        if python_type is bool:
            attr_val = parse_bool(attr_val)
        elif python_type is datetime.datetime:
            attr_val = datetime.datetime.fromisoformat(str(attr_val))
        elif python_type is datetime.date:
            attr_val = datetime.date.fromisoformat(str(attr_val)[:10])
        elif python_type is datetime.time:
            attr_val = datetime.time.fromisoformat(str(attr_val))
        else:
            attr_val = python_type(attr_val)
    except (TypeError, ValueError) as exc:
        clocktower.log.warning(f'Invalid {python_type.__name__} {exc} for value "{attr_val}"')
        raise ValidationError(f'Invalid value for "{column.key}"', errors={column.key: [f"Not a valid {python_type.__name__}."]})

    return attr_val


def parse_bool(attr_val):
    """
    :param attr_val: bool, number or one of the TRUE_STRINGS/FALSE_STRINGS
    :return: boolean
    """
    if isinstance(attr_val, (bool, int)):
        return bool(attr_val)
    value = str(attr_val).strip().lower()
    if value in TRUE_STRINGS:
        return True
    if value in FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean {attr_val!r}")

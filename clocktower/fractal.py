# Resource serialization
#
# The controllers build their responses with a small fluent api:
#
#     fractal().collection(books).transform_with(BookTransformer).parse_includes(["author"]).to_dict()
#     => {"data": [{"id": 1, "title": "...", "author": {"data": {...}}}, ...]}
#
# The transformer can be
# - a `Transformer` (marshmallow schema) class, the includes are honored
# - any other marshmallow schema class or instance
# - a plain callable that maps an instance to a dictionary (includes are ignored)
# - None: the instance `to_dict()` method is used
#
import math
from marshmallow import Schema
import clocktower
from .transformer import Transformer
from .config import get_config


def paginate(collection, page_offset, page_limit):
    """
    :param collection: list of instances or sqla query object
    :param page_offset: number of items to skip
    :param page_limit: number of items to return
    :return: items, pagination meta dict
    """
    if isinstance(collection, (list, tuple)) or not hasattr(collection, "offset"):
        items = list(collection)
        total = len(items)
        items = items[page_offset : page_offset + page_limit]
    else:
        # sqla query: let the database do the work
        total = collection.count()
        items = collection.offset(page_offset).limit(page_limit).all()

    pagination = {
        "total": total,
        "count": len(items),
        "per_page": page_limit,
        "current_page": page_offset // page_limit + 1,
        "total_pages": math.ceil(total / page_limit),
    }
    return items, pagination


class Fractal:
    """
    Builder for item and collection resources
    """

    def __init__(self):
        self._data = None
        self._many = False
        self._transformer = None
        self._includes = []
        self._meta = {}
        self._page = None

    def item(self, data):
        """
        :param data: instance to be serialized
        """
        self._data = data
        self._many = False
        return self

    def collection(self, data):
        """
        :param data: iterable of instances (list or sqla query)
        """
        self._data = data
        self._many = True
        return self

    def transform_with(self, transformer):
        self._transformer = transformer
        return self

    def parse_includes(self, includes):
        """
        :param includes: list of relationship names or a delimited string
        """
        if isinstance(includes, str):
            includes = includes.split(get_config("INCLUDE_DELIMITER") or ",")
        for include in includes or []:
            include = include.strip()
            if include and include not in self._includes:
                self._includes.append(include)
        return self

    def add_meta(self, **meta):
        self._meta.update(meta)
        return self

    def paginate(self, page_offset, page_limit):
        """
        Only return a page of the collection, pagination info will be added to the "meta"
        """
        self._page = (page_offset, page_limit)
        return self

    def get_includes(self):
        return list(self._includes)

    def transform(self, data):
        """
        :param data: instance or list of instances
        :return: the transformed data
        """
        transformer = self._transformer
        if data is None:
            return None

        if isinstance(transformer, type) and issubclass(transformer, Transformer):
            excludes = transformer.get_excludes(self._includes)
            return transformer(exclude=excludes, many=self._many).dump(data)

        if isinstance(transformer, type) and issubclass(transformer, Schema):
            transformer = transformer()

        if self._includes and not isinstance(transformer, Transformer):
            clocktower.log.debug(f"Ignoring includes {self._includes} for transformer {transformer}")

        if isinstance(transformer, Schema):
            return transformer.dump(data, many=self._many)

        if transformer is None:
            transformer = _default_transformer
        elif not callable(transformer):
            raise TypeError(f"Invalid transformer {transformer!r}")

        if self._many:
            return [transformer(instance) for instance in data]
        return transformer(data)

    def to_dict(self):
        """
        :return: {"data": ... , "meta": ...}
        """
        data = self._data
        meta = dict(self._meta)
        if self._many and self._page is not None:
            data, meta["pagination"] = paginate(data, *self._page)

        result = {"data": self.transform(data)}
        if meta:
            result["meta"] = meta
        return result

    to_array = to_dict


def _default_transformer(instance):
    """
    used when no transformer is configured
    """
    to_dict = getattr(instance, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(vars(instance))


def fractal():
    """
    :return: a new resource builder
    """
    return Fractal()

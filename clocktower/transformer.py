# Transformers turn model instances into plain (json serializable) dictionaries.
#
# A transformer is a marshmallow schema, relationships are declared with the `Include` field:
#
#     class BookTransformer(Transformer):
#         id = fields.Integer()
#         title = fields.String()
#         author = Include(lambda: AuthorTransformer)
#
# "author" is only serialized when the client requests it with "?include=author"
# (or when it's listed in `default_includes`), dotted names include nested relationships,
# e.g. "?include=author.books"
#
# Pass the nested transformer class (or its registered name), not an instance:
# marshmallow only applies nested excludes when it instantiates the nested schema itself
#
from marshmallow import Schema, fields, class_registry


class Include(fields.Nested):
    """
    Nested relationship that is only serialized when it has been requested,
    the serialized relationship is wrapped in a {"data": ...} object
    """

    def _serialize(self, nested_obj, attr, obj, **kwargs):
        result = super()._serialize(nested_obj, attr, obj, **kwargs)
        return {"data": result}

    def transformer_class(self, parent_cls):
        """
        :param parent_cls: the schema class that declares this field
        :return: the nested schema class, or None if it can't be determined
        """
        nested = self.nested
        if isinstance(nested, str):
            if nested == "self":
                return parent_cls
            return class_registry.get_class(nested)
        if isinstance(nested, Schema):
            return nested.__class__
        if isinstance(nested, type) and issubclass(nested, Schema):
            return nested
        if callable(nested):
            # lambda: SomeTransformer() or lambda: SomeTransformer
            nested = nested()
            return nested.__class__ if isinstance(nested, Schema) else nested
        return None


def include_tree(includes):
    """
    :param includes: list of (dotted) relationship names, e.g. ["author.books", "tags"]
    :return: nested dict, e.g. {"author": {"books": {}}, "tags": {}}
    """
    tree = {}
    for include in includes:
        node = tree
        for name in include.strip().split("."):
            if name:
                node = node.setdefault(name, {})
    return tree


class Transformer(Schema):
    """
    Base class for the resource transformers

    default_includes: relationships that are always serialized
    """

    default_includes = ()

    @classmethod
    def available_includes(cls):
        """
        :return: names of the relationships that can be included
        """
        return [name for name, field in cls._declared_fields.items() if isinstance(field, Include)]

    @classmethod
    def get_excludes(cls, includes, prefix=""):
        """
        :param includes: requested relationship names or an `include_tree` result
        :param prefix: dotted prefix of the nested schema
        :return: (dotted) names of the Include fields that shouldn't be serialized,
                 to be passed as the marshmallow "exclude" argument
        """
        tree = includes if isinstance(includes, dict) else include_tree(includes)
        excludes = []
        for name in cls.available_includes():
            if name not in tree and name not in cls.default_includes:
                excludes.append(prefix + name)
                continue
            nested_cls = cls._declared_fields[name].transformer_class(cls)
            if isinstance(nested_cls, type) and issubclass(nested_cls, Transformer):
                excludes += nested_cls.get_excludes(tree.get(name, {}), f"{prefix}{name}.")
        return excludes

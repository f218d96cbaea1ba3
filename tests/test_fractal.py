from types import SimpleNamespace

import pytest
from marshmallow import Schema, fields

from clocktower import Transformer, Include, fractal
from clocktower.fractal import paginate
from clocktower.transformer import include_tree


class TagTransformer(Transformer):
    name = fields.String()


class PostTransformer(Transformer):
    default_includes = ("tags",)

    id = fields.Integer()
    title = fields.String()
    tags = Include(lambda: TagTransformer, many=True)
    writer = Include("WriterTransformer")


class WriterTransformer(Transformer):
    id = fields.Integer()
    name = fields.String()
    posts = Include(lambda: PostTransformer, many=True)


class PlainSchema(Schema):
    title = fields.String()


def _writer():
    writer = SimpleNamespace(id=1, name="Ann")
    writer.posts = [
        SimpleNamespace(id=10, title="First", tags=[SimpleNamespace(name="news")], writer=writer),
        SimpleNamespace(id=11, title="Second", tags=[], writer=writer),
    ]
    return writer


def test_include_tree() -> None:
    assert include_tree(["writer.posts", "tags", "writer.name"]) == {"writer": {"posts": {}, "name": {}}, "tags": {}}


def test_available_includes_and_excludes() -> None:
    assert PostTransformer.available_includes() == ["tags", "writer"]
    assert PostTransformer.get_excludes([]) == ["writer"]
    assert WriterTransformer.get_excludes(["posts"]) == ["posts.writer"]
    assert WriterTransformer.get_excludes(["posts.writer"]) == ["posts.writer.posts"]


def test_item_without_includes() -> None:
    post = _writer().posts[0]
    result = fractal().item(post).transform_with(PostTransformer).to_dict()
    assert result == {"data": {"id": 10, "title": "First", "tags": {"data": [{"name": "news"}]}}}


def test_collection_with_nested_includes() -> None:
    writer = _writer()
    result = fractal().collection([writer]).transform_with(WriterTransformer).parse_includes("posts.writer").to_dict()
    post = result["data"][0]["posts"]["data"][0]
    assert post["writer"] == {"data": {"id": 1, "name": "Ann"}}
    assert post["tags"] == {"data": [{"name": "news"}]}


def test_unknown_includes_are_ignored() -> None:
    result = fractal().item(_writer()).transform_with(WriterTransformer).parse_includes(["unknown", "posts.nope"]).to_dict()
    assert [post["id"] for post in result["data"]["posts"]["data"]] == [10, 11]


def test_parse_includes_deduplicates() -> None:
    resource = fractal().parse_includes("a, b,a").parse_includes(["b", "c", ""])
    assert resource.get_includes() == ["a", "b", "c"]


def test_missing_item_is_none() -> None:
    assert fractal().item(None).transform_with(PostTransformer).to_dict() == {"data": None}


def test_plain_schema_and_callable_transformers() -> None:
    posts = _writer().posts
    assert fractal().collection(posts).transform_with(PlainSchema).to_dict() == {"data": [{"title": "First"}, {"title": "Second"}]}
    assert fractal().item(posts[1]).transform_with(PlainSchema()).to_dict() == {"data": {"title": "Second"}}
    result = fractal().collection(posts).transform_with(lambda post: {"key": post.id}).parse_includes(["tags"]).to_dict()
    assert result == {"data": [{"key": 10}, {"key": 11}]}


def test_default_transformer_uses_to_dict() -> None:
    item = SimpleNamespace(to_dict=lambda: {"id": 3})
    assert fractal().item(item).to_dict() == {"data": {"id": 3}}


def test_invalid_transformer() -> None:
    with pytest.raises(TypeError):
        fractal().item(SimpleNamespace()).transform_with(42).to_dict()


def test_meta_and_pagination() -> None:
    items = [{"id": i} for i in range(5)]
    result = fractal().collection(items).transform_with(dict).paginate(2, 2).add_meta(source="test").to_dict()
    assert result == {
        "data": [{"id": 2}, {"id": 3}],
        "meta": {"source": "test", "pagination": {"total": 5, "count": 2, "per_page": 2, "current_page": 2, "total_pages": 3}},
    }


def test_paginate_past_the_end() -> None:
    items, pagination = paginate(list(range(3)), 10, 5)
    assert items == []
    assert pagination == {"total": 3, "count": 0, "per_page": 5, "current_page": 3, "total_pages": 1}

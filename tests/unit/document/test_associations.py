"""Unit tests for embedded one/many associations."""

from __future__ import annotations

import pytest

from docmapper.document import Document, EmbeddedDocument, embeds_many, embeds_one
from docmapper.schema import key, type_name


class Comment(EmbeddedDocument):
    body = key(str)


class Reply(Comment):
    quoted = key(str)


class Author(EmbeddedDocument):
    handle = key(str)


class Post(Document):
    title = key(str)
    author = embeds_one(Author)
    comments = embeds_many(Comment)


@pytest.mark.unit
def test_to_many_slot_starts_empty_and_is_omitted() -> None:
    """Unpopulated associations should not appear in the document."""
    post = Post(title="Hello")

    assert "comments" not in post.as_document()
    assert "author" not in post.as_document()
    assert post.comments == []


@pytest.mark.unit
def test_mappings_are_loaded_and_linked_to_parent() -> None:
    post = Post(title="Hello", comments=[{"body": "first"}, None, Comment(body="second")])

    assert [comment.body for comment in post.comments] == ["first", "second"]
    assert all(comment.parent_document is post for comment in post.comments)


@pytest.mark.unit
def test_single_mapping_is_wrapped_for_to_many() -> None:
    post = Post()

    post.comments = {"body": "only"}

    assert [comment.body for comment in post.comments] == ["only"]


@pytest.mark.unit
def test_embeds_one_serializes_as_object() -> None:
    post = Post(title="Hello")
    post.author = {"handle": "ada"}

    document = post.as_document()

    assert post.author.parent_document is post
    assert document["author"]["handle"] == "ada"
    assert list(document) == ["_id", "title", "author"]


@pytest.mark.unit
def test_embeds_many_serializes_list_and_loads_polymorphically() -> None:
    """Embedded subclasses should keep their discriminator through a round trip."""
    post = Post(comments=[Comment(body="plain"), Reply(body="re", quoted="plain")])

    document = post.as_document()
    loaded = Post.load(document)

    assert document["comments"][1]["_type"] == type_name(Reply)
    assert "_type" not in document["comments"][0]
    assert [type(comment) for comment in loaded.comments] == [Comment, Reply]
    assert loaded.comments[1].quoted == "plain"
    assert all(comment.parent_document is loaded for comment in loaded.comments)


@pytest.mark.unit
def test_associations_are_inherited() -> None:
    class FeaturedPost(Post):
        pass

    featured = FeaturedPost(comments=[{"body": "nice"}])

    assert FeaturedPost.schema().lookup_association("comments") is not None
    assert featured.as_document()["comments"][0]["body"] == "nice"
    assert not FeaturedPost.has_key("comments")

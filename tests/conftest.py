"""Shared pytest fixtures for doclet normalization tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

import pytest

from docletnorm.doclets import (
    AssignmentDescriptor,
    DeclarationDescriptor,
    Doclet,
    MethodDescriptor,
    PropertyDescriptor,
)


def _clear_root_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def reset_logging_state() -> Iterator[None]:
    """Ensure each test runs with a clean logging configuration."""

    _clear_root_handlers()
    yield
    _clear_root_handlers()


@pytest.fixture
def player_module() -> list[Doclet]:
    """Records for ``export default class Player`` as the extractor emits them.

    The class declares a private method, a static factory, a private arrow
    field, a public method and assigns ``this.#volume`` in its constructor.
    Each record carries the descriptor of the node it came from.
    """

    return [
        Doclet(
            name="module.exports",
            longname="module.exports",
            kind="class",
            scope="global",
            source=DeclarationDescriptor(
                declaration="class",
                declared_name="Player",
                default_export=True,
            ),
        ),
        Doclet(
            name="",
            longname="module.exports",
            memberof="module.exports",
            kind="function",
            scope="instance",
            source=MethodDescriptor(
                key_name="decode",
                private_key=True,
                in_class_body=True,
                class_name="Player",
            ),
        ),
        Doclet(
            name="create",
            longname="module.exports#create",
            memberof="module.exports",
            kind="function",
            scope="instance",
            source=MethodDescriptor(
                key_name="create",
                static=True,
                in_class_body=True,
                class_name="Player",
            ),
        ),
        Doclet(
            name="handler",
            longname="Player#handler",
            memberof="Player",
            kind="member",
            scope="instance",
            source=PropertyDescriptor(
                key_name="handler",
                private_key=True,
                value_node="arrow",
            ),
        ),
        Doclet(
            name="this.",
            longname="Player#this.",
            memberof="Player",
            kind="member",
            scope="instance",
            source=AssignmentDescriptor(
                private_target="volume",
                value_node="literal",
            ),
        ),
        Doclet(
            name="play",
            longname="module.exports#play",
            memberof="module.exports",
            kind="function",
            scope="instance",
            source=MethodDescriptor(
                key_name="play",
                in_class_body=True,
                class_name="Player",
            ),
        ),
    ]


@pytest.fixture
def find_doclet() -> Callable[[list[Doclet], str], Doclet]:
    """Return a lookup for the single doclet with a given name."""

    def _find(doclets: list[Doclet], name: str) -> Doclet:
        matches = [doclet for doclet in doclets if doclet.name == name]
        assert len(matches) == 1, f"expected one {name!r}, got {len(matches)}"
        return matches[0]

    return _find

"""Tests for default-export resolution."""

from __future__ import annotations

import pytest

from docletnorm.doclets.exports import object_export_name, resolve_default_exports
from docletnorm.doclets.models import (
    DeclarationDescriptor,
    Doclet,
    MethodDescriptor,
)


def _object_wrapper(**fields: object) -> Doclet:
    fields.setdefault("name", "exports")
    fields.setdefault("memberof", "module")
    return Doclet(
        longname="module.exports",
        kind="member",
        **fields,
    )


def test_function_wrapper_is_rehomed_to_top_level_function() -> None:
    wrapper = Doclet(
        name="exports",
        memberof="module",
        longname="module.exports",
        kind="function",
    )
    declared = Doclet(
        name="createPlayer",
        longname="createPlayer",
        kind="function",
        scope="global",
    )

    result, _ = resolve_default_exports([wrapper, declared])

    assert result.name == "createPlayer"
    assert result.longname == "createPlayer"
    assert result.memberof is None


def test_function_wrapper_without_candidate_is_untouched() -> None:
    wrapper = Doclet(name="exports", memberof="module", kind="function")

    (result,) = resolve_default_exports([wrapper])

    assert result is wrapper


def test_object_literal_uses_type_tag() -> None:
    wrapper = _object_wrapper(
        comment="/** @type {PlayerOptions} */",
        source=DeclarationDescriptor(
            declaration="object",
            first_property_key="volume",
        ),
    )

    (result,) = resolve_default_exports([wrapper])

    assert result.name == "PlayerOptions"
    assert result.longname == "PlayerOptions"
    assert result.memberof is None


def test_object_literal_falls_back_to_first_key() -> None:
    wrapper = _object_wrapper(
        source=DeclarationDescriptor(
            declaration="object",
            first_property_key="volume",
        ),
    )

    (result,) = resolve_default_exports([wrapper])

    assert result.name == "volumeConfig"


def test_pending_object_without_hints_keeps_sentinel() -> None:
    pending = _object_wrapper(
        name="defaultExport",
        memberof=None,
        source=DeclarationDescriptor(declaration="object", default_export=True),
    )

    (result,) = resolve_default_exports([pending])

    assert result.name == "defaultExport"
    assert result.longname == "defaultExport"


def test_global_method_is_relinked_to_first_class() -> None:
    player = Doclet(name="Player", longname="Player", kind="class")
    stray = Doclet(
        name="play",
        longname="play",
        kind="function",
        scope="global",
        source=MethodDescriptor(key_name="play"),
    )

    _, result = resolve_default_exports([player, stray])

    assert result.scope == "instance"
    assert result.memberof == "Player"
    assert result.longname == "Player#play"
    assert result.id == "Player#play"


def test_global_method_without_class_is_untouched() -> None:
    stray = Doclet(
        name="play",
        kind="function",
        scope="global",
        source=MethodDescriptor(key_name="play"),
    )

    (result,) = resolve_default_exports([stray])

    assert result is stray


def test_placeholder_class_names_are_not_candidates() -> None:
    wrapper_class = Doclet(name="exports", memberof="module", kind="class")
    stray = Doclet(
        name="play",
        kind="function",
        scope="global",
        source=MethodDescriptor(key_name="play"),
    )

    _, result = resolve_default_exports([wrapper_class, stray])

    assert result is stray


@pytest.mark.parametrize(
    ("doclet", "expected"),
    [
        (Doclet(description="Options. @type { PlayerOptions }"), "PlayerOptions"),
        (
            Doclet(comment="/** no tag */", description="@type {Settings}"),
            "Settings",
        ),
        (
            Doclet(
                source=DeclarationDescriptor(
                    declaration="object",
                    first_property_key="theme",
                )
            ),
            "themeConfig",
        ),
        (Doclet(), "defaultExport"),
    ],
)
def test_object_export_name_precedence(doclet: Doclet, expected: str) -> None:
    assert object_export_name(doclet) == expected

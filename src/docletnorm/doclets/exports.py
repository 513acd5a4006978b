"""Default-export resolution.

Runs after every other collection pass because it relinks records against
class and function names those passes have already corrected. Where a module
defines several top-level classes or functions, the first one in discovery
order wins.
"""

from __future__ import annotations

import re
from typing import Callable, Sequence

from .models import (
    EXPORT_WRAPPER_NAME,
    OBJECT_NAME_SUFFIX,
    PENDING_EXPORT_NAME,
    DeclarationDescriptor,
    Doclet,
    DocletKind,
    DocletScope,
    MethodDescriptor,
    instance_longname,
)

__all__ = ["object_export_name", "resolve_default_exports"]

_TYPE_TAG = re.compile(r"@type\s*\{([^}]+)\}")
_PLACEHOLDER_NAMES = frozenset({EXPORT_WRAPPER_NAME, PENDING_EXPORT_NAME})


def resolve_default_exports(doclets: Sequence[Doclet]) -> list[Doclet]:
    """Rehome default-export wrapper records onto their declared names."""

    snapshot = tuple(doclets)
    function_name = _first_name(snapshot, _is_top_level_function)
    class_name = _first_name(snapshot, _is_named_class)
    return [
        _resolve(doclet, function_name, class_name)
        for doclet in snapshot
    ]


def object_export_name(doclet: Doclet) -> str:
    """Return the name for a default-exported object literal.

    Prefers an ``@type {Name}`` tag in the doclet's text, then a name built
    from the literal's first property key, then the generic sentinel.

    Example:
        >>> object_export_name(Doclet(description="@type {PlayerOptions}"))
        'PlayerOptions'
    """

    for text in (doclet.comment, doclet.description):
        if not text:
            continue
        match = _TYPE_TAG.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()

    source = doclet.source
    if isinstance(source, DeclarationDescriptor) and source.first_property_key:
        return f"{source.first_property_key}{OBJECT_NAME_SUFFIX}"
    return PENDING_EXPORT_NAME


def _resolve(
    doclet: Doclet,
    function_name: str | None,
    class_name: str | None,
) -> Doclet:
    if doclet.kind == DocletKind.FUNCTION and doclet.is_export_wrapper:
        if function_name is None:
            return doclet
        return doclet.evolve(
            name=function_name,
            longname=function_name,
            memberof=None,
        )

    if (
        doclet.kind == DocletKind.MEMBER
        and (doclet.is_export_wrapper or doclet.name == PENDING_EXPORT_NAME)
        and isinstance(doclet.source, DeclarationDescriptor)
        and doclet.source.declaration == "object"
    ):
        name = object_export_name(doclet)
        return doclet.evolve(name=name, longname=name, memberof=None)

    if (
        doclet.kind == DocletKind.FUNCTION
        and doclet.scope == DocletScope.GLOBAL
        and isinstance(doclet.source, MethodDescriptor)
        and class_name is not None
    ):
        longname = instance_longname(class_name, doclet.name)
        return doclet.evolve(
            scope=DocletScope.INSTANCE.value,
            memberof=class_name,
            longname=longname,
            id=longname,
        )

    return doclet


def _first_name(
    snapshot: Sequence[Doclet],
    predicate: Callable[[Doclet], bool],
) -> str | None:
    for doclet in snapshot:
        if predicate(doclet):
            return doclet.name
    return None


def _has_real_name(doclet: Doclet) -> bool:
    return bool(doclet.name) and doclet.name not in _PLACEHOLDER_NAMES


def _is_top_level_function(doclet: Doclet) -> bool:
    return (
        doclet.kind == DocletKind.FUNCTION
        and doclet.scope == DocletScope.GLOBAL
        and _has_real_name(doclet)
    )


def _is_named_class(doclet: Doclet) -> bool:
    return doclet.kind == DocletKind.CLASS and _has_real_name(doclet)

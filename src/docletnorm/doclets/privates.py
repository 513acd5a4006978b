"""Private-member finalization over the collected doclet set."""

from __future__ import annotations

from typing import Sequence

from .models import (
    PRIVATE_SIGIL,
    Doclet,
    DocletAccess,
    DocletKind,
    DocletScope,
    PropertyDescriptor,
    instance_longname,
    static_longname,
    with_sigil,
)

__all__ = ["collect_placeholder_names", "finalize_private_members"]


def collect_placeholder_names(doclets: Sequence[Doclet]) -> frozenset[str]:
    """Return names of undocumented private-field declaration placeholders."""

    return frozenset(
        doclet.name
        for doclet in doclets
        if doclet.undocumented
        and isinstance(doclet.source, PropertyDescriptor)
        and doclet.source.is_private_field
    )


def finalize_private_members(doclets: Sequence[Doclet]) -> list[Doclet]:
    """Promote private shadows, reclassify arrow fields, fix private names.

    Placeholders keep ``undocumented = True``; only the value-carrying shadow
    record sharing the placeholder's name becomes a visible private member.
    """

    placeholders = collect_placeholder_names(doclets)
    return [_finalize(doclet, placeholders) for doclet in doclets]


def _finalize(doclet: Doclet, placeholders: frozenset[str]) -> Doclet:
    doclet = _promote_shadow(doclet, placeholders)

    if doclet.kind == DocletKind.MEMBER and doclet.source is not None:
        if doclet.source.is_arrow_value:
            doclet = doclet.evolve(kind=DocletKind.FUNCTION.value)

    return _apply_private_contract(doclet)


def _promote_shadow(doclet: Doclet, placeholders: frozenset[str]) -> Doclet:
    if doclet.undocumented:
        return doclet
    if doclet.kind != DocletKind.MEMBER or doclet.scope != DocletScope.INNER:
        return doclet
    if doclet.name not in placeholders:
        return doclet

    name = with_sigil(doclet.name)
    return doclet.evolve(
        name=name,
        longname=(
            instance_longname(doclet.memberof, name)
            if doclet.memberof
            else name
        ),
        access=DocletAccess.PRIVATE.value,
        scope=DocletScope.INSTANCE.value,
    )


def _apply_private_contract(doclet: Doclet) -> Doclet:
    source = doclet.source
    if source is None:
        return doclet
    if not (source.is_private_method or source.is_private_field):
        return doclet
    if not doclet.name:
        return doclet

    name = with_sigil(doclet.name)
    longname = doclet.longname
    if not doclet.memberof:
        longname = longname or name
    else:
        degenerate = _degenerate_longnames(doclet.memberof, name)
        if not longname or longname in degenerate:
            longname = instance_longname(doclet.memberof, name)
    return doclet.evolve(
        name=name,
        longname=longname,
        access=DocletAccess.PRIVATE.value,
    )


def _degenerate_longnames(owner: str, name: str) -> set[str]:
    """Longnames the extractor produces when it has lost the private sigil."""

    bare = name.lstrip(PRIVATE_SIGIL)
    return {
        owner,
        instance_longname(owner, bare),
        static_longname(owner, bare),
    }

"""Static scope normalization.

Static-ness belongs to the declaration site, not to any one copy of a
doclet. Augmentation can duplicate a static member into an instance-scoped
copy that no longer carries its descriptor's static flag, so the second
sub-pass re-identifies copies by name. Two unrelated declarations that share
a name are coalesced as a result; that is a known limitation.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .models import (
    INSTANCE_SEPARATOR,
    MODULE_NAMESPACE_PREFIX,
    STATIC_SEPARATOR,
    Doclet,
    DocletScope,
    static_longname,
    static_owner,
    swap_to_static,
)

__all__ = [
    "collect_static_names",
    "mark_static",
    "normalize_static_scope",
    "propagate_static_names",
]


def mark_static(doclet: Doclet) -> Doclet:
    """Return ``doclet`` with static scope and static separators.

    The owner path is rewritten first. A longname that is the owner joined to
    the name is rebuilt from the rewritten owner, so nested owners such as
    ``Outer#Sub#make`` become ``Outer.Sub.make``.
    """

    memberof = static_owner(doclet.memberof)
    return doclet.evolve(
        scope=DocletScope.STATIC.value,
        longname=_static_longname(doclet, memberof),
        memberof=memberof,
    )


def _static_longname(doclet: Doclet, memberof: str | None) -> str | None:
    longname = doclet.longname
    if longname and doclet.memberof and memberof and doclet.name:
        for separator in (INSTANCE_SEPARATOR, STATIC_SEPARATOR):
            suffix = f"{doclet.memberof}{separator}{doclet.name}"
            if longname.endswith(suffix):
                prefix = longname[: -len(suffix)]
                return prefix + static_longname(memberof, doclet.name)
    return swap_to_static(longname)


def collect_static_names(doclets: Iterable[Doclet]) -> frozenset[str]:
    """Return every non-empty name attached to a static-flagged descriptor."""

    return frozenset(
        doclet.name
        for doclet in doclets
        if doclet.name
        and doclet.source is not None
        and doclet.source.is_static
    )


def propagate_static_names(
    doclets: Sequence[Doclet],
    names: frozenset[str],
) -> list[Doclet]:
    """Mark every doclet whose name is in ``names`` as static."""

    return [
        mark_static(doclet) if doclet.name in names else doclet
        for doclet in doclets
    ]


def normalize_static_scope(doclets: Sequence[Doclet]) -> list[Doclet]:
    """Run the per-record sub-pass, then the name-based propagation."""

    flagged = [
        mark_static(doclet) if _declared_static_member(doclet) else doclet
        for doclet in doclets
    ]
    return propagate_static_names(flagged, collect_static_names(flagged))


def _declared_static_member(doclet: Doclet) -> bool:
    if doclet.source is None or not doclet.source.is_static:
        return False
    memberof = doclet.memberof
    return bool(memberof) and not memberof.startswith(MODULE_NAMESPACE_PREFIX)

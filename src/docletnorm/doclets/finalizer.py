"""Final corrections applied after the host's augmentation step."""

from __future__ import annotations

from typing import Sequence

from .models import Doclet, DocletAccess
from .statics import collect_static_names, propagate_static_names

__all__ = ["finalize_after_augmentation"]


def finalize_after_augmentation(doclets: Sequence[Doclet]) -> list[Doclet]:
    """Re-stamp inherited static copies and backfill private access."""

    restamped = propagate_static_names(doclets, collect_static_names(doclets))
    return [
        doclet.evolve(access=DocletAccess.PRIVATE.value)
        if doclet.has_private_name and not doclet.access
        else doclet
        for doclet in restamped
    ]

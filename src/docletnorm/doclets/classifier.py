"""Per-symbol corrections applied while the extractor walks the tree."""

from __future__ import annotations

from .models import (
    ANONYMOUS_FUNCTION_NAME,
    EXPORT_SLOT_NAME,
    MALFORMED_THIS_NAME,
    PENDING_EXPORT_NAME,
    AssignmentDescriptor,
    DeclarationDescriptor,
    Doclet,
    DocletScope,
    MethodDescriptor,
    PropertyDescriptor,
    SourceDescriptor,
    instance_longname,
    static_longname,
    static_owner,
)

__all__ = ["classify_symbol"]


def classify_symbol(
    doclet: Doclet,
    descriptor: SourceDescriptor | None,
) -> Doclet:
    """Return ``doclet`` corrected for the syntax node it came from.

    Each rule checks its own preconditions and is a no-op otherwise, so an
    unexpected descriptor leaves the record exactly as the extractor made it.
    """

    if descriptor is None:
        return doclet

    changes: dict[str, object] = {}
    name = _default_export_name(doclet, descriptor)
    if name is not None:
        changes["name"] = name

    if (
        isinstance(descriptor, MethodDescriptor)
        and descriptor.in_class_body
        and descriptor.class_name
    ):
        changes["memberof"] = descriptor.class_name
        changes["scope"] = DocletScope.INSTANCE.value

    if isinstance(descriptor, PropertyDescriptor) and descriptor.static:
        changes["scope"] = DocletScope.STATIC.value
        memberof = changes.get("memberof", doclet.memberof)
        changes["memberof"] = static_owner(memberof)  # type: ignore[arg-type]

    if (
        isinstance(descriptor, MethodDescriptor)
        and descriptor.private_key
        and descriptor.key_name
    ):
        changes["name"] = descriptor.key_name

    if (
        isinstance(descriptor, AssignmentDescriptor)
        and descriptor.private_target
        and doclet.name == MALFORMED_THIS_NAME
    ):
        changes["name"] = descriptor.private_target

    if "name" in changes or "memberof" in changes:
        longname = _qualify(doclet.evolve(**changes))
        if longname:
            changes["longname"] = longname

    return doclet.evolve(**changes)


def _default_export_name(
    doclet: Doclet,
    descriptor: SourceDescriptor,
) -> str | None:
    if doclet.name != EXPORT_SLOT_NAME:
        return None
    if not isinstance(descriptor, DeclarationDescriptor):
        return None
    if not descriptor.default_export:
        return None
    if descriptor.declared_name:
        return descriptor.declared_name
    if descriptor.declaration == "function":
        return ANONYMOUS_FUNCTION_NAME
    if descriptor.declaration == "object":
        # Replaced by the default-export resolver once the set is complete.
        return PENDING_EXPORT_NAME
    return None


def _qualify(doclet: Doclet) -> str | None:
    """Longname the host derives from a record's name, owner and scope."""

    if not doclet.name:
        return None
    if not doclet.memberof:
        return doclet.name
    if doclet.scope == DocletScope.STATIC:
        return static_longname(doclet.memberof, doclet.name)
    return instance_longname(doclet.memberof, doclet.name)

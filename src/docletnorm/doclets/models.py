"""Doclet records and the syntax descriptors attached to them."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

__all__ = [
    "ANONYMOUS_FUNCTION_NAME",
    "EXPORT_SLOT_NAME",
    "EXPORT_WRAPPER_MEMBEROF",
    "EXPORT_WRAPPER_NAME",
    "INSTANCE_SEPARATOR",
    "MALFORMED_THIS_NAME",
    "MODULE_NAMESPACE_PREFIX",
    "OBJECT_NAME_SUFFIX",
    "PENDING_EXPORT_NAME",
    "PRIVATE_SIGIL",
    "STATIC_SEPARATOR",
    "ArrowDescriptor",
    "AssignmentDescriptor",
    "DeclarationDescriptor",
    "Doclet",
    "DocletAccess",
    "DocletKind",
    "DocletScope",
    "ExportDescriptor",
    "MethodDescriptor",
    "OtherDescriptor",
    "PropertyDescriptor",
    "SourceDescriptor",
    "instance_longname",
    "static_longname",
    "static_owner",
    "swap_to_static",
    "with_sigil",
]

PRIVATE_SIGIL = "#"
INSTANCE_SEPARATOR = "#"
STATIC_SEPARATOR = "."
MODULE_NAMESPACE_PREFIX = "module:"

# Name the extractor gives a default-exported declaration before resolution.
EXPORT_SLOT_NAME = "module.exports"
EXPORT_WRAPPER_NAME = "exports"
EXPORT_WRAPPER_MEMBEROF = "module"

# Emitted by the extractor for ``this.#field = value`` assignments.
MALFORMED_THIS_NAME = "this."

ANONYMOUS_FUNCTION_NAME = "anonymousFunction"
PENDING_EXPORT_NAME = "defaultExport"
OBJECT_NAME_SUFFIX = "Config"

_SEPARATOR_CHARS = frozenset({INSTANCE_SEPARATOR, STATIC_SEPARATOR, "~", ":"})


class DocletKind(StrEnum):
    """Doclet kinds the normalization passes inspect."""

    CLASS = "class"
    FUNCTION = "function"
    MEMBER = "member"


class DocletScope(StrEnum):
    """Scope classification encoded by a doclet's longname separator."""

    INSTANCE = "instance"
    STATIC = "static"
    INNER = "inner"
    GLOBAL = "global"


class DocletAccess(StrEnum):
    """Access levels assigned by the pipeline."""

    PUBLIC = "public"
    PRIVATE = "private"


class _Descriptor(BaseModel):
    """Common read-only queries shared by every descriptor variant."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    @property
    def is_static(self) -> bool:
        return False

    @property
    def is_private_method(self) -> bool:
        return False

    @property
    def is_private_field(self) -> bool:
        return False

    @property
    def is_arrow_value(self) -> bool:
        return False


class MethodDescriptor(_Descriptor):
    """A method definition, optionally keyed by a private name."""

    node: Literal["method"] = "method"
    key_name: str | None = None
    private_key: bool = False
    static: bool = False
    in_class_body: bool = False
    class_name: str | None = Field(
        default=None,
        description="Declared name of the enclosing class, if it has one.",
    )

    @property
    def is_static(self) -> bool:
        return self.static

    @property
    def is_private_method(self) -> bool:
        return self.private_key


class PropertyDescriptor(_Descriptor):
    """A class field definition (``foo = 1``, ``static #bar``)."""

    node: Literal["property"] = "property"
    key_name: str | None = None
    private_key: bool = False
    static: bool = False
    value_node: str | None = Field(
        default=None,
        description="Node category of the initializer, e.g. ``arrow``.",
    )

    @property
    def is_static(self) -> bool:
        return self.static

    @property
    def is_private_field(self) -> bool:
        return self.private_key

    @property
    def is_arrow_value(self) -> bool:
        return self.value_node == "arrow"


class ArrowDescriptor(_Descriptor):
    """An arrow-function expression."""

    node: Literal["arrow"] = "arrow"

    @property
    def is_arrow_value(self) -> bool:
        return True


class AssignmentDescriptor(_Descriptor):
    """An assignment expression such as ``this.#local = 123``."""

    node: Literal["assignment"] = "assignment"
    private_target: str | None = Field(
        default=None,
        description="Identifier of a private-name member access on the left.",
    )
    value_node: str | None = None

    @property
    def is_private_field(self) -> bool:
        return bool(self.private_target)

    @property
    def is_arrow_value(self) -> bool:
        return self.value_node == "arrow"


class DeclarationDescriptor(_Descriptor):
    """A class, function or object-literal declaration."""

    node: Literal["declaration"] = "declaration"
    declaration: Literal["class", "function", "object"]
    declared_name: str | None = None
    default_export: bool = False
    first_property_key: str | None = None


class ExportDescriptor(_Descriptor):
    """An export declaration node.

    No rule reads this variant. Default-export detection uses
    :attr:`DeclarationDescriptor.default_export`; records tagged ``export``
    are carried through loading, normalization and dumping unchanged.
    """

    node: Literal["export"] = "export"
    default: bool = False


class OtherDescriptor(_Descriptor):
    """Any node category the pipeline has no rules for."""

    node: Literal["other"] = "other"
    category: str | None = None


SourceDescriptor = Annotated[
    Union[
        MethodDescriptor,
        PropertyDescriptor,
        ArrowDescriptor,
        AssignmentDescriptor,
        DeclarationDescriptor,
        ExportDescriptor,
        OtherDescriptor,
    ],
    Field(discriminator="node"),
]


class Doclet(BaseModel):
    """Metadata record describing one documented symbol.

    ``kind`` and ``scope`` stay plain strings so records carrying values the
    pipeline does not know about still load and pass through untouched.
    Attributes not modelled here are preserved as extras.
    """

    name: str = ""
    longname: str | None = None
    memberof: str | None = None
    kind: str | None = None
    scope: str | None = None
    access: str | None = None
    undocumented: bool = False
    description: str | None = None
    comment: str | None = None
    id: str | None = None
    source: SourceDescriptor | None = None

    model_config = {
        "extra": "allow",
        "validate_assignment": True,
    }

    def evolve(self, **changes: Any) -> "Doclet":
        """Return a copy with ``changes`` applied, leaving ``self`` intact."""

        if not changes:
            return self
        return self.model_copy(update=changes)

    @property
    def has_private_name(self) -> bool:
        return self.name.startswith(PRIVATE_SIGIL)

    @property
    def is_export_wrapper(self) -> bool:
        return (
            self.name == EXPORT_WRAPPER_NAME
            and self.memberof == EXPORT_WRAPPER_MEMBEROF
        )


def with_sigil(name: str) -> str:
    """Return ``name`` carrying the private sigil exactly once.

    Example:
        >>> with_sigil("handler"), with_sigil("##handler")
        ('#handler', '#handler')
    """

    return PRIVATE_SIGIL + name.lstrip(PRIVATE_SIGIL)


def instance_longname(owner: str | None, name: str) -> str:
    """Join ``owner`` and ``name`` with the instance separator."""

    return f"{owner}{INSTANCE_SEPARATOR}{name}"


def static_longname(owner: str | None, name: str) -> str:
    """Join ``owner`` and ``name`` with the static separator."""

    return f"{owner}{STATIC_SEPARATOR}{name}"


def swap_to_static(value: str | None) -> str | None:
    """Rewrite the first instance separator in ``value`` to a static one.

    Only a ``#`` that follows a name character counts as a separator, so the
    sigil of a private member (``Foo.#bar``) is left alone and repeated calls
    are stable.

    Example:
        >>> swap_to_static("Foo##bar"), swap_to_static("Foo.#bar")
        ('Foo.#bar', 'Foo.#bar')
    """

    if not value:
        return value
    for index, char in enumerate(value):
        if char != INSTANCE_SEPARATOR or index == 0:
            continue
        if value[index - 1] in _SEPARATOR_CHARS:
            continue
        return value[:index] + STATIC_SEPARATOR + value[index + 1 :]
    return value


def static_owner(value: str | None) -> str | None:
    """Rewrite every instance separator in an owner path to a static one.

    Example:
        >>> static_owner("A#B#C")
        'A.B.C'
    """

    current = value
    while True:
        swapped = swap_to_static(current)
        if swapped == current:
            return current
        current = swapped

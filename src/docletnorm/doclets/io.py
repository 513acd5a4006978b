"""Reading and writing doclet dumps as JSON arrays."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from pydantic import TypeAdapter, ValidationError

from .errors import DocletLoadError
from .models import Doclet

__all__ = ["dump_doclets", "dumps_doclets", "load_doclets", "loads_doclets"]

_DOCLET_LIST = TypeAdapter(list[Doclet])


def loads_doclets(text: str, *, path: Path | None = None) -> list[Doclet]:
    """Parse a JSON array of doclet objects.

    Raises:
        DocletLoadError: If ``text`` is not JSON or fails validation.
    """

    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocletLoadError(
            f"Doclet dump is not valid JSON: {exc}",
            path=path,
        ) from exc

    if not isinstance(payload, list):
        raise DocletLoadError(
            "Doclet dump must contain a JSON array at the root",
            path=path,
        )

    try:
        return _DOCLET_LIST.validate_python(payload)
    except ValidationError as exc:
        raise DocletLoadError(
            f"Doclet dump failed validation: {exc}",
            path=path,
        ) from exc


def load_doclets(path: Path) -> list[Doclet]:
    """Read doclets from ``path``.

    Raises:
        DocletLoadError: If the file cannot be read or parsed.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocletLoadError(
            f"Failed to read doclet dump {path}: {exc}",
            path=path,
        ) from exc
    return loads_doclets(text, path=path)


def dumps_doclets(doclets: Sequence[Doclet], *, indent: int | None = 2) -> str:
    """Serialize ``doclets`` to a JSON array, omitting unset optional fields."""

    payload = _DOCLET_LIST.dump_python(
        list(doclets),
        mode="json",
        exclude_none=True,
    )
    return json.dumps(payload, indent=indent, ensure_ascii=False)


def dump_doclets(doclets: Sequence[Doclet], path: Path) -> None:
    """Write ``doclets`` to ``path`` as JSON."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_doclets(doclets) + "\n", encoding="utf-8")

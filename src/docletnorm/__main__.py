"""Console-script entry point for :mod:`docletnorm`."""

from __future__ import annotations

from docletnorm.cli import create_app


def main() -> None:
    """Execute the CLI application.

    Example:
        >>> from docletnorm.__main__ import main
        >>> main()  # doctest: +SKIP
    """

    app = create_app()
    app(prog_name="docletnorm")


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    main()


__all__ = ["main"]

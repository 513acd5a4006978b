"""Command-line interface primitives for :mod:`docletnorm`.

This module exposes the Typer application behind the ``docletnorm`` console
script. It replays the normalization lifecycle over doclet dumps produced by
a documentation host, which is handy for inspecting what each stage changes.

Example:
    >>> import typer
    >>> from docletnorm.cli import create_app
    >>> isinstance(create_app(), typer.Typer)
    True
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import typer
from pydantic import ValidationError

from docletnorm.core.config import (
    USER_CONFIG_FILENAME,
    AppConfig,
    env_overrides,
    load_config,
    load_packaged_defaults,
    read_user_config,
    render_user_config,
)
from docletnorm.core.logging import configure_logging, get_logger
from docletnorm.doclets import (
    DEFAULT_STAGES,
    DocletNormError,
    NormalizationPipeline,
    PipelineReport,
    build_pipeline,
    dump_doclets,
    dumps_doclets,
    load_doclets,
)

_app_help = (
    "Normalize doclets for private, static, arrow-bound and default-exported "
    "class members."
    "\n\n"
    "Use `docletnorm normalize doclets.json` to replay the pipeline over a "
    "doclet dump."
)


def _resolve_config(
    config_path: Path | None,
    *,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Load configuration honoring CLI > env > file > defaults."""

    path = config_path or Path.cwd() / USER_CONFIG_FILENAME
    try:
        return load_config(
            defaults=load_packaged_defaults(),
            user_config=read_user_config(path),
            env_config=env_overrides(os.environ),
            cli_overrides=cli_overrides,
        )
    except (ValidationError, TypeError, ValueError) as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


def _build_pipeline(config: AppConfig) -> NormalizationPipeline:
    try:
        return build_pipeline(config.pipeline)
    except DocletNormError as exc:
        typer.secho(f"Pipeline error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


def _emit_report(report: PipelineReport, *, records: int) -> None:
    """Print a per-stage summary to stderr."""

    typer.secho("Normalization complete", fg=typer.colors.GREEN, bold=True, err=True)
    typer.echo(f"  records: {records}", err=True)
    typer.echo(
        f"  symbols: {report.symbols_changed}/{report.symbols_classified} "
        "changed",
        err=True,
    )
    for outcome in report.outcomes:
        if outcome.failed:
            line = f"  - {outcome.stage}: failed - {outcome.error}"
        else:
            line = f"  - {outcome.stage}: {outcome.changed} changed"
        typer.echo(line, err=True)


def create_app() -> "typer.Typer":
    """Return the Typer application powering the ``docletnorm`` CLI."""

    app = typer.Typer(
        help=_app_help,
        no_args_is_help=True,
        rich_markup_mode="rich",
        invoke_without_command=False,
        cls=typer.core.TyperGroup,
    )

    @app.callback()
    def main_callback() -> None:
        """Top-level CLI callback ensuring subcommands are dispatched."""

        return None

    @app.command(
        "normalize",
        help="Replay the normalization lifecycle over a doclet JSON dump.",
    )
    def normalize_command(  # noqa: PLR0913 - CLI surface area intentionally explicit
        source: Path = typer.Argument(
            ...,
            metavar="INPUT",
            exists=True,
            dir_okay=False,
            readable=True,
            help="JSON array of doclets to normalize.",
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write normalized doclets here instead of stdout.",
        ),
        config_path: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help=f"Config file (defaults to ./{USER_CONFIG_FILENAME}).",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            "-l",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
        skip_symbols: bool = typer.Option(
            False,
            "--skip-symbols",
            help="Do not replay per-symbol classification.",
        ),
        fail_fast: bool = typer.Option(
            False,
            "--fail-fast",
            help="Abort on the first failing stage.",
        ),
    ) -> None:
        overrides: dict[str, Any] = {}
        if log_level:
            overrides["log_level"] = log_level
        if fail_fast:
            overrides["pipeline"] = {"fail_fast": True}

        config = _resolve_config(config_path, cli_overrides=overrides)
        try:
            configure_logging(level=config.log_level, log_file=config.log_file)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
        logger = get_logger(__name__, command="normalize")

        pipeline = _build_pipeline(config)
        try:
            doclets = load_doclets(source)
            run = pipeline.run_all(doclets, classify=not skip_symbols)
        except DocletNormError as exc:
            typer.secho(str(exc), fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc

        if output is None:
            typer.echo(dumps_doclets(run.doclets))
        else:
            dump_doclets(run.doclets, output)

        logger.info(
            "normalize-complete",
            source=str(source),
            output=str(output) if output else "-",
            records=len(run.doclets),
            changed=run.report.changed,
        )
        _emit_report(run.report, records=len(run.doclets))

    @app.command("stages", help="List the configured stages in run order.")
    def stages_command(
        config_path: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help=f"Config file (defaults to ./{USER_CONFIG_FILENAME}).",
        ),
    ) -> None:
        config = _resolve_config(config_path)
        pipeline = _build_pipeline(config)
        enabled = {stage.name for stage in pipeline.stages}
        for stage in DEFAULT_STAGES:
            state = "enabled" if stage.name in enabled else "disabled"
            typer.echo(
                f"{stage.event.value:<20} {stage.name:<18} {state:<9} "
                f"{stage.description}"
            )

    @app.command("init-config", help="Write a commented configuration file.")
    def init_config_command(
        destination: Path = typer.Argument(
            Path(USER_CONFIG_FILENAME),
            metavar="PATH",
            help="Where to write the configuration file.",
        ),
        force: bool = typer.Option(
            False,
            "--force",
            "-f",
            help="Overwrite an existing file.",
        ),
    ) -> None:
        if destination.exists() and not force:
            typer.secho(
                f"{destination} already exists; pass --force to overwrite.",
                fg=typer.colors.YELLOW,
                err=True,
            )
            raise typer.Exit(code=1)

        config = load_config(defaults=load_packaged_defaults())
        text = render_user_config(
            config,
            stage_names=[stage.name for stage in DEFAULT_STAGES],
        )
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(text, encoding="utf-8")
        typer.secho(f"Wrote {destination}", fg=typer.colors.GREEN)

    return app


__all__ = ["create_app"]

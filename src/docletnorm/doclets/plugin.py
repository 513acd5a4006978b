"""Adapter exposing the pipeline as lifecycle hooks for a documentation host.

Hosts hand over mutable events. Handlers compute corrected records with the
pure pipeline and write them back into the event, so the host keeps working
with the same list object it passed in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from docletnorm.core.logging import Logger, get_logger

from .models import Doclet, SourceDescriptor
from .pipeline import (
    LifecycleEvent,
    NormalizationPipeline,
    PipelineReport,
    PipelineRun,
)

__all__ = [
    "DocletPlugin",
    "ParseCompleteEvent",
    "ProcessingCompleteEvent",
    "SymbolFoundEvent",
]


@dataclass(slots=True)
class SymbolFoundEvent:
    """One discovered symbol: the record in progress and its origin node."""

    doclet: Doclet
    descriptor: SourceDescriptor | None = None


@dataclass(slots=True)
class ParseCompleteEvent:
    """Fired once the extractor has collected every record."""

    doclets: list[Doclet] = field(default_factory=list)


@dataclass(slots=True)
class ProcessingCompleteEvent:
    """Fired after the host's inheritance and augmentation step."""

    doclets: list[Doclet] = field(default_factory=list)


class DocletPlugin:
    """Lifecycle hooks backed by a :class:`NormalizationPipeline`.

    ``report`` covers the current documentation run only; the first event
    after ``processingComplete`` starts a new one.

    Example:
        >>> plugin = DocletPlugin()
        >>> sorted(plugin.handlers)
        ['parseComplete', 'processingComplete', 'symbolFound']
    """

    def __init__(
        self,
        pipeline: NormalizationPipeline | None = None,
        *,
        logger: Logger | None = None,
    ) -> None:
        self._pipeline = pipeline or NormalizationPipeline()
        self._logger = logger or get_logger(__name__)
        self.report = PipelineReport()
        self._run_finished = False

    @property
    def handlers(self) -> Mapping[str, Callable[[Any], None]]:
        return {
            LifecycleEvent.SYMBOL_FOUND.value: self.symbol_found,
            LifecycleEvent.PARSE_COMPLETE.value: self.parse_complete,
            LifecycleEvent.PROCESSING_COMPLETE.value: self.processing_complete,
        }

    def dispatch(self, event_name: str, event: Any) -> None:
        """Route ``event`` to the handler registered for ``event_name``.

        Unknown event names are ignored so hosts may broadcast every event.
        """

        handler = self.handlers.get(event_name)
        if handler is None:
            self._logger.debug("event-ignored", event=event_name)
            return
        handler(event)

    def symbol_found(self, event: SymbolFoundEvent) -> None:
        self._begin_run()
        updated = self._pipeline.symbol_found(event.doclet, event.descriptor)
        self.report.symbols_classified += 1
        if updated != event.doclet:
            self.report.symbols_changed += 1
        event.doclet = updated

    def parse_complete(self, event: ParseCompleteEvent) -> None:
        self._begin_run()
        run = self._pipeline.run(LifecycleEvent.PARSE_COMPLETE, event.doclets)
        self._write_back(event.doclets, run)

    def processing_complete(self, event: ProcessingCompleteEvent) -> None:
        self._begin_run()
        run = self._pipeline.run(
            LifecycleEvent.PROCESSING_COMPLETE,
            event.doclets,
        )
        self._write_back(event.doclets, run)
        self._run_finished = True

    def _begin_run(self) -> None:
        """Start a fresh report once the previous run has completed."""

        if self._run_finished:
            self.report = PipelineReport()
            self._run_finished = False

    def _write_back(self, target: list[Doclet], run: PipelineRun) -> None:
        target[:] = run.doclets
        self.report.extend(run.report)
        self._logger.info(
            "lifecycle-complete",
            records=len(target),
            changed=sum(o.changed for o in run.report.outcomes),
            failures=len(run.report.failures),
        )

"""Ordered normalization stages bound to host lifecycle events.

The symbol-level classifier runs per discovered symbol. Every other stage
receives an immutable snapshot of the whole record set and returns a new
list of the same length and order. Stage order and dependencies are checked
when a pipeline is built, so a misordered definition fails before any
records are touched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Iterable, Sequence

from pydantic import BaseModel, Field

from docletnorm.core.config import PipelineSettings
from docletnorm.core.logging import Logger, get_logger

from .classifier import classify_symbol
from .errors import PipelineDefinitionError, StageContractError
from .exports import resolve_default_exports
from .finalizer import finalize_after_augmentation
from .models import Doclet, SourceDescriptor
from .privates import finalize_private_members
from .statics import normalize_static_scope

__all__ = [
    "DEFAULT_STAGES",
    "LifecycleEvent",
    "NormalizationPipeline",
    "PipelineReport",
    "PipelineRun",
    "Stage",
    "StageOutcome",
    "build_pipeline",
]

StageFunction = Callable[[Sequence[Doclet]], list[Doclet]]
SymbolClassifier = Callable[[Doclet, SourceDescriptor | None], Doclet]


class LifecycleEvent(StrEnum):
    """Host events the pipeline reacts to, in the order they fire."""

    SYMBOL_FOUND = "symbolFound"
    PARSE_COMPLETE = "parseComplete"
    PROCESSING_COMPLETE = "processingComplete"

    @property
    def position(self) -> int:
        return list(LifecycleEvent).index(self)


@dataclass(frozen=True, slots=True)
class Stage:
    """A named record-set pass bound to one lifecycle event.

    Args:
        name: Slug used in configuration and reports.
        event: Lifecycle event that triggers the stage.
        apply: Pure function mapping a snapshot to the corrected records.
        requires: Names of stages that must have run before this one.
        description: Short human-readable summary.
    """

    name: str
    event: LifecycleEvent
    apply: StageFunction
    requires: tuple[str, ...] = ()
    description: str = ""


class StageOutcome(BaseModel):
    """Result of running one stage over a record set."""

    stage: str
    event: LifecycleEvent
    changed: int = Field(default=0, ge=0)
    error: str | None = None

    model_config = {"frozen": True, "use_enum_values": True}

    @property
    def failed(self) -> bool:
        return self.error is not None


class PipelineReport(BaseModel):
    """Per-stage outcomes accumulated across lifecycle events."""

    outcomes: list[StageOutcome] = Field(default_factory=list)
    symbols_classified: int = Field(default=0, ge=0)
    symbols_changed: int = Field(default=0, ge=0)

    @property
    def changed(self) -> int:
        return self.symbols_changed + sum(o.changed for o in self.outcomes)

    @property
    def failures(self) -> tuple[StageOutcome, ...]:
        return tuple(o for o in self.outcomes if o.failed)

    def extend(self, other: "PipelineReport") -> None:
        """Fold ``other`` into this report."""

        self.outcomes.extend(other.outcomes)
        self.symbols_classified += other.symbols_classified
        self.symbols_changed += other.symbols_changed


@dataclass(slots=True)
class PipelineRun:
    """Records produced by a run together with its report."""

    doclets: list[Doclet]
    report: PipelineReport = field(default_factory=PipelineReport)


DEFAULT_STAGES: tuple[Stage, ...] = (
    Stage(
        name="private-members",
        event=LifecycleEvent.PARSE_COMPLETE,
        apply=finalize_private_members,
        description=(
            "Promote private-field shadows, reclassify arrow fields, and fix "
            "private names."
        ),
    ),
    Stage(
        name="static-scope",
        event=LifecycleEvent.PARSE_COMPLETE,
        apply=normalize_static_scope,
        requires=("private-members",),
        description="Stamp static scope and separators, then propagate.",
    ),
    Stage(
        name="default-exports",
        event=LifecycleEvent.PARSE_COMPLETE,
        apply=resolve_default_exports,
        requires=("private-members", "static-scope"),
        description="Rehome default-export wrappers onto declared names.",
    ),
    Stage(
        name="post-augmentation",
        event=LifecycleEvent.PROCESSING_COMPLETE,
        apply=finalize_after_augmentation,
        requires=("static-scope",),
        description="Re-stamp inherited static copies, backfill access.",
    ),
)


class NormalizationPipeline:
    """Validated, ordered set of normalization stages."""

    def __init__(
        self,
        stages: Iterable[Stage] = DEFAULT_STAGES,
        *,
        classifier: SymbolClassifier | None = classify_symbol,
        fail_fast: bool = False,
        logger: Logger | None = None,
    ) -> None:
        self._stages = tuple(stages)
        self._classifier = classifier
        self._fail_fast = fail_fast
        self._logger = logger or get_logger(__name__)
        _validate_stages(self._stages)

    @property
    def stages(self) -> tuple[Stage, ...]:
        return self._stages

    def stages_for(self, event: LifecycleEvent) -> tuple[Stage, ...]:
        """Return the stages bound to ``event`` in run order."""

        return tuple(stage for stage in self._stages if stage.event == event)

    def symbol_found(
        self,
        doclet: Doclet,
        descriptor: SourceDescriptor | None,
    ) -> Doclet:
        """Classify one record-in-progress; returns the corrected copy."""

        if self._classifier is None:
            return doclet
        return self._classifier(doclet, descriptor)

    def run(
        self,
        event: LifecycleEvent,
        doclets: Sequence[Doclet],
    ) -> PipelineRun:
        """Run every stage bound to ``event`` over ``doclets``."""

        event = LifecycleEvent(event)
        if event == LifecycleEvent.SYMBOL_FOUND:
            return self.classify_all(doclets)

        current = list(doclets)
        report = PipelineReport()
        for stage in self.stages_for(event):
            current, outcome = self._run_stage(stage, current)
            report.outcomes.append(outcome)
        return PipelineRun(doclets=current, report=report)

    def classify_all(self, doclets: Sequence[Doclet]) -> PipelineRun:
        """Replay symbol discovery using each record's own descriptor."""

        classified = [
            self.symbol_found(doclet, doclet.source) for doclet in doclets
        ]
        changed = _count_changed(doclets, classified)
        report = PipelineReport(
            symbols_classified=len(classified),
            symbols_changed=changed,
        )
        return PipelineRun(doclets=classified, report=report)

    def run_all(
        self,
        doclets: Sequence[Doclet],
        *,
        classify: bool = True,
    ) -> PipelineRun:
        """Run the full lifecycle over an already-collected record set.

        The host's augmentation step between the two collection events is
        external and therefore not replayed here.
        """

        events = [
            LifecycleEvent.PARSE_COMPLETE,
            LifecycleEvent.PROCESSING_COMPLETE,
        ]
        if classify:
            events.insert(0, LifecycleEvent.SYMBOL_FOUND)

        current = list(doclets)
        report = PipelineReport()
        for event in events:
            result = self.run(event, current)
            current = result.doclets
            report.extend(result.report)
        return PipelineRun(doclets=current, report=report)

    def _run_stage(
        self,
        stage: Stage,
        doclets: list[Doclet],
    ) -> tuple[list[Doclet], StageOutcome]:
        logger = self._logger.bind(stage=stage.name, event=stage.event.value)
        snapshot = tuple(doclets)
        try:
            result = stage.apply(snapshot)
            if len(result) != len(snapshot):
                raise StageContractError(
                    f"Stage {stage.name!r} returned {len(result)} records "
                    f"for {len(snapshot)} inputs",
                    stage=stage.name,
                    expected=len(snapshot),
                    actual=len(result),
                )
        except Exception as exc:
            if self._fail_fast:
                raise
            logger.warning("stage-failed", error=str(exc), exc_info=True)
            outcome = StageOutcome(
                stage=stage.name,
                event=stage.event,
                error=str(exc),
            )
            return doclets, outcome

        changed = _count_changed(snapshot, result)
        logger.debug("stage-complete", changed=changed, records=len(result))
        outcome = StageOutcome(
            stage=stage.name,
            event=stage.event,
            changed=changed,
        )
        return list(result), outcome


def build_pipeline(
    settings: PipelineSettings | None = None,
    *,
    stages: Iterable[Stage] = DEFAULT_STAGES,
    logger: Logger | None = None,
) -> NormalizationPipeline:
    """Return a pipeline with the stages ``settings`` leaves enabled.

    Raises:
        PipelineDefinitionError: If ``settings`` names an unknown stage or an
            enabled stage requires a disabled one.
    """

    settings = settings or PipelineSettings()
    available = tuple(stages)
    known = {stage.name for stage in available}
    unknown = sorted(set(settings.stages) - known)
    if unknown:
        raise PipelineDefinitionError(
            f"Unknown pipeline stage(s): {', '.join(unknown)}",
            stage=unknown[0],
        )

    enabled = tuple(
        stage for stage in available if settings.is_enabled(stage.name)
    )
    return NormalizationPipeline(
        enabled,
        fail_fast=settings.fail_fast,
        logger=logger,
    )


def _validate_stages(stages: Sequence[Stage]) -> None:
    seen: set[str] = set()
    previous: LifecycleEvent | None = None
    for stage in stages:
        if stage.event == LifecycleEvent.SYMBOL_FOUND:
            raise PipelineDefinitionError(
                f"Stage {stage.name!r} cannot run per symbol; symbol "
                "corrections belong to the classifier",
                stage=stage.name,
            )
        if stage.name in seen:
            raise PipelineDefinitionError(
                f"Duplicate stage name {stage.name!r}",
                stage=stage.name,
            )
        if previous is not None and stage.event.position < previous.position:
            raise PipelineDefinitionError(
                f"Stage {stage.name!r} runs on {stage.event.value} after a "
                f"{previous.value} stage",
                stage=stage.name,
            )
        missing = [name for name in stage.requires if name not in seen]
        if missing:
            raise PipelineDefinitionError(
                f"Stage {stage.name!r} requires {', '.join(missing)} to run "
                "earlier",
                stage=stage.name,
            )
        seen.add(stage.name)
        previous = stage.event


def _count_changed(
    before: Sequence[Doclet],
    after: Sequence[Doclet],
) -> int:
    return sum(1 for old, new in zip(before, after) if old != new)

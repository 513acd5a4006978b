"""Tests for :mod:`docletnorm.doclets.pipeline`."""

from __future__ import annotations

from typing import Sequence

import pytest

from docletnorm.core.config import PipelineSettings
from docletnorm.doclets import (
    DEFAULT_STAGES,
    Doclet,
    LifecycleEvent,
    MethodDescriptor,
    NormalizationPipeline,
    PipelineDefinitionError,
    Stage,
    StageContractError,
    build_pipeline,
)


def _identity(doclets: Sequence[Doclet]) -> list[Doclet]:
    return list(doclets)


def _explode(doclets: Sequence[Doclet]) -> list[Doclet]:
    raise RuntimeError("boom")


def _drop_all(doclets: Sequence[Doclet]) -> list[Doclet]:
    return []


def _rename(doclets: Sequence[Doclet]) -> list[Doclet]:
    return [doclet.evolve(name=f"{doclet.name}!") for doclet in doclets]


def test_full_lifecycle_normalizes_default_exported_class(
    player_module, find_doclet
) -> None:
    run = NormalizationPipeline().run_all(player_module)
    doclets = run.doclets

    assert len(doclets) == len(player_module)

    player = find_doclet(doclets, "Player")
    assert player.longname == "Player"
    assert player.kind == "class"

    decode = find_doclet(doclets, "#decode")
    assert decode.longname == "Player##decode"
    assert decode.access == "private"
    assert decode.scope == "instance"

    create = find_doclet(doclets, "create")
    assert create.scope == "static"
    assert create.longname == "Player.create"

    handler = find_doclet(doclets, "#handler")
    assert handler.kind == "function"
    assert handler.longname == "Player##handler"
    assert handler.access == "private"

    volume = find_doclet(doclets, "#volume")
    assert volume.longname == "Player##volume"
    assert volume.access == "private"

    play = find_doclet(doclets, "play")
    assert play.memberof == "Player"
    assert play.longname == "Player#play"
    assert play.scope == "instance"
    assert play.access is None

    assert not run.report.failures
    assert run.report.symbols_classified == len(player_module)


def test_full_lifecycle_is_idempotent(player_module) -> None:
    pipeline = NormalizationPipeline()

    once = pipeline.run_all(player_module).doclets
    twice = pipeline.run_all(once).doclets

    assert twice == once


def test_inputs_are_not_mutated(player_module) -> None:
    before = [doclet.model_copy(deep=True) for doclet in player_module]

    NormalizationPipeline().run_all(player_module)

    assert player_module == before


def test_augmented_copies_of_static_members_end_static(
    player_module, find_doclet
) -> None:
    pipeline = NormalizationPipeline()
    classified = pipeline.run(LifecycleEvent.SYMBOL_FOUND, player_module).doclets
    parsed = pipeline.run(LifecycleEvent.PARSE_COMPLETE, classified).doclets

    inherited = Doclet(
        name="create",
        longname="Remix#create",
        memberof="Remix",
        kind="function",
        scope="instance",
    )
    augmented = [*parsed, inherited]
    final = pipeline.run(LifecycleEvent.PROCESSING_COMPLETE, augmented).doclets

    copies = [doclet for doclet in final if doclet.name == "create"]
    assert [doclet.scope for doclet in copies] == ["static", "static"]
    assert copies[1].longname == "Remix.create"


def test_run_accepts_event_names(player_module) -> None:
    pipeline = NormalizationPipeline()

    by_name = pipeline.run("parseComplete", player_module)
    by_member = pipeline.run(LifecycleEvent.PARSE_COMPLETE, player_module)

    assert by_name.doclets == by_member.doclets
    assert [o.stage for o in by_name.report.outcomes] == [
        "private-members",
        "static-scope",
        "default-exports",
    ]


def test_symbol_found_without_classifier_is_noop() -> None:
    doclet = Doclet(name="module.exports")
    pipeline = NormalizationPipeline(classifier=None)

    assert pipeline.symbol_found(doclet, None) is doclet


def test_stages_for_filters_by_event() -> None:
    pipeline = NormalizationPipeline()

    names = [s.name for s in pipeline.stages_for(LifecycleEvent.PROCESSING_COMPLETE)]

    assert names == ["post-augmentation"]
    assert pipeline.stages_for(LifecycleEvent.SYMBOL_FOUND) == ()


def test_failing_stage_keeps_input_records() -> None:
    doclets = [Doclet(name="play")]
    pipeline = NormalizationPipeline(
        [
            Stage("explode", LifecycleEvent.PARSE_COMPLETE, _explode),
            Stage("rename", LifecycleEvent.PARSE_COMPLETE, _rename),
        ]
    )

    run = pipeline.run(LifecycleEvent.PARSE_COMPLETE, doclets)

    assert [doclet.name for doclet in run.doclets] == ["play!"]
    failure, renamed = run.report.outcomes
    assert failure.failed
    assert failure.error == "boom"
    assert renamed.changed == 1
    assert run.report.failures == (failure,)


def test_fail_fast_reraises_stage_errors() -> None:
    pipeline = NormalizationPipeline(
        [Stage("explode", LifecycleEvent.PARSE_COMPLETE, _explode)],
        fail_fast=True,
    )

    with pytest.raises(RuntimeError, match="boom"):
        pipeline.run(LifecycleEvent.PARSE_COMPLETE, [Doclet(name="play")])


def test_stage_changing_record_count_violates_contract() -> None:
    stage = Stage("drop", LifecycleEvent.PARSE_COMPLETE, _drop_all)
    doclets = [Doclet(name="play")]

    run = NormalizationPipeline([stage]).run(LifecycleEvent.PARSE_COMPLETE, doclets)
    assert run.doclets == doclets
    assert run.report.outcomes[0].failed

    strict = NormalizationPipeline([stage], fail_fast=True)
    with pytest.raises(StageContractError) as exc:
        strict.run(LifecycleEvent.PARSE_COMPLETE, doclets)
    assert exc.value.stage == "drop"
    assert (exc.value.expected, exc.value.actual) == (1, 0)


@pytest.mark.parametrize(
    ("stages", "offender"),
    [
        ([Stage("early", LifecycleEvent.SYMBOL_FOUND, _identity)], "early"),
        (
            [
                Stage("twice", LifecycleEvent.PARSE_COMPLETE, _identity),
                Stage("twice", LifecycleEvent.PARSE_COMPLETE, _identity),
            ],
            "twice",
        ),
        (
            [
                Stage("late", LifecycleEvent.PROCESSING_COMPLETE, _identity),
                Stage("early", LifecycleEvent.PARSE_COMPLETE, _identity),
            ],
            "early",
        ),
        (
            [
                Stage(
                    "exports",
                    LifecycleEvent.PARSE_COMPLETE,
                    _identity,
                    requires=("privates",),
                ),
                Stage("privates", LifecycleEvent.PARSE_COMPLETE, _identity),
            ],
            "exports",
        ),
    ],
)
def test_inconsistent_stage_definitions_are_rejected(
    stages: list[Stage],
    offender: str,
) -> None:
    with pytest.raises(PipelineDefinitionError) as exc:
        NormalizationPipeline(stages)

    assert exc.value.stage == offender


def test_default_stage_order() -> None:
    assert [stage.name for stage in DEFAULT_STAGES] == [
        "private-members",
        "static-scope",
        "default-exports",
        "post-augmentation",
    ]


def test_build_pipeline_drops_disabled_stages() -> None:
    settings = PipelineSettings(stages={"default_exports": False})

    pipeline = build_pipeline(settings)

    assert [stage.name for stage in pipeline.stages] == [
        "private-members",
        "static-scope",
        "post-augmentation",
    ]


def test_build_pipeline_rejects_unknown_stage() -> None:
    with pytest.raises(PipelineDefinitionError, match="bogus"):
        build_pipeline(PipelineSettings(stages={"bogus": True}))


def test_build_pipeline_rejects_disabled_dependency() -> None:
    settings = PipelineSettings(stages={"private-members": False})

    with pytest.raises(PipelineDefinitionError) as exc:
        build_pipeline(settings)

    assert exc.value.stage == "static-scope"


def test_build_pipeline_passes_fail_fast() -> None:
    pipeline = build_pipeline(
        PipelineSettings(fail_fast=True),
        stages=[Stage("explode", LifecycleEvent.PARSE_COMPLETE, _explode)],
    )

    with pytest.raises(RuntimeError):
        pipeline.run(LifecycleEvent.PARSE_COMPLETE, [Doclet()])


def test_private_static_method_uses_static_separator(find_doclet) -> None:
    doclet = Doclet(
        name="",
        longname="Player",
        memberof="Player",
        kind="function",
        scope="instance",
        source=MethodDescriptor(
            key_name="make",
            private_key=True,
            static=True,
            in_class_body=True,
            class_name="Player",
        ),
    )

    result = find_doclet(NormalizationPipeline().run_all([doclet]).doclets, "#make")

    assert result.scope == "static"
    assert result.longname == "Player.#make"
    assert result.memberof == "Player"
    assert result.access == "private"

"""Doclet normalization service surface."""

from __future__ import annotations

from .classifier import classify_symbol
from .errors import (
    DocletLoadError,
    DocletNormError,
    PipelineDefinitionError,
    StageContractError,
)
from .exports import object_export_name, resolve_default_exports
from .finalizer import finalize_after_augmentation
from .io import dump_doclets, dumps_doclets, load_doclets, loads_doclets
from .models import (
    ArrowDescriptor,
    AssignmentDescriptor,
    DeclarationDescriptor,
    Doclet,
    DocletAccess,
    DocletKind,
    DocletScope,
    ExportDescriptor,
    MethodDescriptor,
    OtherDescriptor,
    PropertyDescriptor,
    SourceDescriptor,
)
from .pipeline import (
    DEFAULT_STAGES,
    LifecycleEvent,
    NormalizationPipeline,
    PipelineReport,
    PipelineRun,
    Stage,
    StageOutcome,
    build_pipeline,
)
from .plugin import (
    DocletPlugin,
    ParseCompleteEvent,
    ProcessingCompleteEvent,
    SymbolFoundEvent,
)
from .privates import finalize_private_members
from .statics import normalize_static_scope

__all__ = [
    "DEFAULT_STAGES",
    "ArrowDescriptor",
    "AssignmentDescriptor",
    "DeclarationDescriptor",
    "Doclet",
    "DocletAccess",
    "DocletKind",
    "DocletLoadError",
    "DocletNormError",
    "DocletPlugin",
    "DocletScope",
    "ExportDescriptor",
    "LifecycleEvent",
    "MethodDescriptor",
    "NormalizationPipeline",
    "OtherDescriptor",
    "ParseCompleteEvent",
    "PipelineDefinitionError",
    "PipelineReport",
    "PipelineRun",
    "ProcessingCompleteEvent",
    "PropertyDescriptor",
    "SourceDescriptor",
    "Stage",
    "StageContractError",
    "StageOutcome",
    "SymbolFoundEvent",
    "build_pipeline",
    "classify_symbol",
    "dump_doclets",
    "dumps_doclets",
    "finalize_after_augmentation",
    "finalize_private_members",
    "load_doclets",
    "loads_doclets",
    "normalize_static_scope",
    "object_export_name",
    "resolve_default_exports",
]

"""
Schemas for the Avro Code Generation Plugin

These schemas define the contracts between the plugin and its collaborators:
- Step: what registered steps are and what they produce
- IDE: the IDE module's directory sets
- Extension: code generation options
"""
from .step_schema import Stage, StepKind, StepStatus, StepInfo, GenerationResult
from .ide_schema import IdeModule
from .extension_schema import FieldVisibility, AvroExtension, CompileOptions

__all__ = [
    # Step
    "Stage",
    "StepKind",
    "StepStatus",
    "StepInfo",
    "GenerationResult",
    # IDE
    "IdeModule",
    # Extension
    "FieldVisibility",
    "AvroExtension",
    "CompileOptions",
]

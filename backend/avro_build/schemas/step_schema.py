"""
Step Schema - Build step contracts

This defines the data that build steps report about themselves:
- Which generation stage a directory or step belongs to
- Execution status
- What a generation step produced
"""
from typing import List, Optional
from pathlib import Path
from enum import Enum
from pydantic import BaseModel, Field


class Stage(str, Enum):
    """Code generation stage (used in generated directory names)"""
    PROTOCOL = "protocol"
    SOURCE = "source"


class StepKind(str, Enum):
    """What a registered step does"""
    PROTOCOL_GENERATION = "PROTOCOL_GENERATION"
    SOURCE_GENERATION = "SOURCE_GENERATION"
    COMPILE = "COMPILE"
    IDE_MODULE = "IDE_MODULE"
    GENERIC = "GENERIC"


class StepStatus(str, Enum):
    """Step execution status"""
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class StepInfo(BaseModel):
    """Description of a registered step (as listed by the step container)"""
    name: str = Field(..., description="Unique step name (e.g., 'generateMainSource')")
    kind: StepKind = Field(StepKind.GENERIC)
    description: Optional[str] = Field(None, description="Human-readable description")
    group: Optional[str] = Field(None, description="Step group (e.g., 'source generation')")
    depends_on: List[str] = Field(default_factory=list, description="Names of steps this one consumes outputs of")
    realized: bool = Field(False, description="True once the step object has been created and configured")


class GenerationResult(BaseModel):
    """Outcome of running a generation step"""
    step_name: str = Field(...)
    output_dir: Path = Field(..., description="Directory the generated files were written to")
    inputs: List[Path] = Field(default_factory=list, description="Definition files that were compiled")
    generated_files: List[Path] = Field(default_factory=list)
    status: StepStatus = Field(StepStatus.COMPLETED)


__all__ = [
    "Stage",
    "StepKind",
    "StepStatus",
    "StepInfo",
    "GenerationResult",
]

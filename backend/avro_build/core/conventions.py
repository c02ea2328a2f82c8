"""
Directory Conventions - Deterministic names and paths

Stable path contract (do not change silently; IDE projects and build
scripts depend on it):
- input root:   src/<grouping>/avro
- output roots: <buildRoot>/generated-<grouping>-avro-protocol
                <buildRoot>/generated-<grouping>-avro-source

All functions here are pure: same arguments, same result.
"""
from pathlib import Path
from typing import Union

from config import DEFINITION_DIR_TEMPLATE, GENERATED_DIR_PREFIX
from avro_build.core.provider import Provider
from avro_build.schemas import Stage


def definition_dir(project_dir: Path, grouping_name: str) -> Path:
    """Directory holding a grouping's hand-written .avdl/.avsc/.avpr files"""
    return Path(project_dir) / DEFINITION_DIR_TEMPLATE.format(grouping=grouping_name)


def generated_dir_name(grouping_name: str, stage: Union[Stage, str]) -> str:
    """Name of the build-root child holding one stage's output for a grouping"""
    stage = Stage(stage)
    return f"{GENERATED_DIR_PREFIX}{grouping_name}-avro-{stage.value}"


def generated_output_dir(build_dir: Provider[Path], grouping_name: str, stage: Union[Stage, str]) -> Provider[Path]:
    """Lazy output directory; follows later changes to the build directory"""
    name = generated_dir_name(grouping_name, stage)
    return build_dir.map(lambda directory: Path(directory) / name)


def is_generated_dir_name(name: str) -> bool:
    return name.startswith(GENERATED_DIR_PREFIX)


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def step_name(verb: str, grouping_name: str, target: str = "") -> str:
    """
    Build a step name from its parts

    Examples:
        step_name("generate", "main", "protocol") -> "generateMainProtocol"
        step_name("compile", "test", "java")      -> "compileTestJava"
    """
    parts = [verb] + [capitalize(part) for part in (grouping_name, target) if part]
    name = "".join(part for part in parts if part)
    return name[:1].lower() + name[1:]


def protocol_step_name(grouping_name: str) -> str:
    return step_name("generate", grouping_name, Stage.PROTOCOL.value)


def source_step_name(grouping_name: str) -> str:
    return step_name("generate", grouping_name, Stage.SOURCE.value)


def compile_step_name(grouping_name: str, language: str) -> str:
    return step_name("compile", grouping_name, language)


__all__ = [
    "definition_dir",
    "generated_dir_name",
    "generated_output_dir",
    "is_generated_dir_name",
    "step_name",
    "protocol_step_name",
    "source_step_name",
    "compile_step_name",
]

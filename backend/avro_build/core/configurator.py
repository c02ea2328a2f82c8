"""
Pipeline Configurator - Two-stage generation chain per source grouping

For every grouping this registers:
1. generate<Grouping>Protocol - .avdl files → .avpr protocol descriptors
2. generate<Grouping>Source   - .avsc + .avpr files → Java sources

The protocol step's output is an input of the source step, and the source
step's output becomes a source directory of the grouping, so the grouping's
compile step picks it up without further wiring.

Nothing here reads a lazy value; registration only describes what the steps
will read when they run.
"""
import locale
import logging
from typing import Dict

from config import (
    AVRO_EXTENSION_NAME,
    GROUP_SOURCE_GENERATION,
    IDL_EXTENSION,
    PROTOCOL_EXTENSION,
    RUNTIME_CLASSPATH_CONFIGURATION_NAME,
    SCHEMA_EXTENSION,
)
from avro_build.core.conventions import (
    definition_dir,
    generated_output_dir,
    protocol_step_name,
    source_step_name,
)
from avro_build.core.project import Project, SourceGrouping, StepHandle
from avro_build.core.provider import Provider
from avro_build.core.steps import GenerateProtocolStep, GenerateSourceStep
from avro_build.schemas import AvroExtension, Stage

logger = logging.getLogger(__name__)


class PipelineConfigurator:
    """
    Registers the generation steps of each grouping

    Source step handles are kept by grouping name; other components (the
    IDE reconciler) read them later.
    """

    def __init__(self, project: Project):
        self.project = project
        self.handles: Dict[str, StepHandle[GenerateSourceStep]] = {}

    def configure(self, grouping: SourceGrouping) -> StepHandle[GenerateSourceStep]:
        """
        Register both generation steps for a grouping

        Returns:
            Handle of the source step

        Raises:
            ConfigurationError: If either step name is already taken
        """
        protocol_handle = self._register_protocol_step(grouping)
        source_handle = self._register_source_step(grouping, protocol_handle)

        grouping.src_dir(source_handle.map(lambda step: step.output_dir.get()))
        self.handles[grouping.name] = source_handle

        logger.info(f"[PipelineConfigurator] Configured {protocol_handle.name} → {source_handle.name}")
        return source_handle

    def _register_protocol_step(self, grouping: SourceGrouping) -> StepHandle[GenerateProtocolStep]:
        project = self.project
        classpath = project.configuration(RUNTIME_CLASSPATH_CONFIGURATION_NAME)

        def configure_step(step: GenerateProtocolStep):
            step.description = f"Generates {grouping.name} Avro protocol definition files from IDL files."
            step.group = GROUP_SOURCE_GENERATION
            step.source(definition_dir(project.project_dir, grouping.name))
            step.include(f"**/*.{IDL_EXTENSION}")
            step.classpath.set(classpath)
            step.output_dir.convention(generated_output_dir(project.build_directory(), grouping.name, Stage.PROTOCOL))

        return project.steps.register(protocol_step_name(grouping.name), GenerateProtocolStep, configure_step)

    def _register_source_step(
        self,
        grouping: SourceGrouping,
        protocol_handle: StepHandle[GenerateProtocolStep]
    ) -> StepHandle[GenerateSourceStep]:
        project = self.project

        def configure_step(step: GenerateSourceStep):
            step.description = (
                f"Generates {grouping.name} Avro Java source files from schema/protocol definition files."
            )
            step.group = GROUP_SOURCE_GENERATION
            step.source(definition_dir(project.project_dir, grouping.name))
            step.source(protocol_handle)
            step.include(f"**/*.{SCHEMA_EXTENSION}", f"**/*.{PROTOCOL_EXTENSION}")
            step.output_dir.convention(generated_output_dir(project.build_directory(), grouping.name, Stage.SOURCE))
            step.output_character_encoding.convention(
                Provider(lambda: self.compile_encoding(grouping), f"output character encoding of {step.name}")
            )
            step.settings.convention(
                Provider(lambda: project.extensions.get(AVRO_EXTENSION_NAME) or AvroExtension())
            )

        return project.steps.register(source_step_name(grouping.name), GenerateSourceStep, configure_step)

    def compile_encoding(self, grouping: SourceGrouping) -> str:
        """Encoding of the grouping's compile step, else the platform default"""
        compile_step = self.project.steps.named(grouping.compile_step_name).get()
        return compile_step.encoding or locale.getpreferredencoding(False)


__all__ = ["PipelineConfigurator"]

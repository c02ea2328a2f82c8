"""
Dependency Wirer - Feeds generated sources to the compilers

- The grouping's primary (Java) compile step always consumes the source
  step's output.
- The secondary (Kotlin) compile step consumes it too, but only once the
  Kotlin toolchain is present and a Kotlin compile step is registered for
  the grouping. If either never happens, nothing is wired and nothing fails.
"""
import logging

from config import KOTLIN_TOOLCHAIN
from avro_build.core.project import Project, SourceGrouping, StepHandle

logger = logging.getLogger(__name__)


class DependencyWirer:
    """Adds a source step's output to the compile steps of its grouping"""

    def __init__(self, project: Project, secondary_toolchain: str = KOTLIN_TOOLCHAIN):
        self.project = project
        self.secondary_toolchain = secondary_toolchain

    def wire(self, grouping: SourceGrouping, source_handle: StepHandle):
        """
        Wire the primary compile step now and the secondary one reactively

        Raises:
            ConfigurationError: If the grouping has no primary compile step
        """
        self.project.steps.named(grouping.compile_step_name, lambda step: step.source(source_handle))
        logger.debug(f"[DependencyWirer] {grouping.compile_step_name} consumes {source_handle.name}")

        def on_toolchain_present(toolchain_id: str):
            self.project.roles.when_registered(
                grouping.name,
                toolchain_id,
                lambda compile_handle: self._wire_secondary(compile_handle, source_handle),
            )

        self.project.toolchains.on_toolchain_present(self.secondary_toolchain, on_toolchain_present)

    def _wire_secondary(self, compile_handle: StepHandle, source_handle: StepHandle):
        compile_handle.configure(lambda step: step.source(source_handle))
        logger.info(f"[DependencyWirer] {compile_handle.name} consumes {source_handle.name}")


__all__ = ["DependencyWirer"]

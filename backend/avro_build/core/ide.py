"""
IDE Integration - Module model generation

The IDE module model is rebuilt from scratch every time the ideaModule step
runs: defaults from the project first, then every before-generation hook in
registration order. Writing the model to the IDE's own files is left to the
caller.
"""
import logging
from typing import Callable, List, Optional

from config import MAIN_GROUPING_NAME, TEST_GROUPING_NAME
from avro_build.core.steps import IdeModuleStep
from avro_build.schemas import IdeModule

logger = logging.getLogger(__name__)

IDE_MODULE_STEP_NAME = "ideaModule"


class IdePlugin:
    """Holds the IDE module model and its before-generation hooks"""

    def __init__(self, project):
        self.project = project
        self.module: Optional[IdeModule] = None
        self._before_generation: List[Callable[[IdeModule], None]] = []
        self.generation_step = project.steps.register(IDE_MODULE_STEP_NAME, IdeModuleStep, self._configure_step)

    def _configure_step(self, step: IdeModuleStep):
        step.description = "Generates IDEA module files (IML)."
        step.group = "IDE"
        step.plugin = self

    def before_generation(self, callback: Callable[[IdeModule], None]):
        self._before_generation.append(callback)

    def default_module(self) -> IdeModule:
        """Module as the IDE integration sees the project before any hooks"""
        build_dir = self.project.build_directory().get()
        module = IdeModule(
            name=self.project.name,
            exclude_dirs={build_dir, self.project.file(".gradle")},
        )
        if MAIN_GROUPING_NAME in self.project.groupings:
            module.source_dirs = set(self.project.groupings.get_by_name(MAIN_GROUPING_NAME).resolved_source_dirs())
        if TEST_GROUPING_NAME in self.project.groupings:
            module.test_source_dirs = set(self.project.groupings.get_by_name(TEST_GROUPING_NAME).resolved_source_dirs())
        return module

    def generate(self) -> IdeModule:
        module = self.default_module()
        for callback in self._before_generation:
            callback(module)
        self.module = module
        logger.info(
            f"[IdePlugin] Generated module {module.name}: {len(module.source_dirs)} source, "
            f"{len(module.test_source_dirs)} test source, {len(module.exclude_dirs)} excluded dirs"
        )
        return module


__all__ = ["IdePlugin", "IDE_MODULE_STEP_NAME"]

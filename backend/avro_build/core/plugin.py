"""
Avro Plugin - Wires the generation pipeline into a project

This module ties the components together:
PipelineConfigurator → DependencyWirer → IDEReconciler

Usage:
    project = Project(Path("my-service"))
    apply_plugin(project)
    project.apply_ide()
    project.steps.named("generateMainSource").get().execute()
"""
import logging
from typing import Optional

from config import AVRO_EXTENSION_NAME, IDE_TOOLCHAIN, LOG_LEVEL
from avro_build.core.configurator import PipelineConfigurator
from avro_build.core.ide_reconciler import IDEReconciler
from avro_build.core.project import Project, SourceGrouping
from avro_build.core.steps import IdeModuleStep
from avro_build.core.wirer import DependencyWirer
from avro_build.schemas import AvroExtension

logger = logging.getLogger(__name__)
logging.basicConfig(level=LOG_LEVEL)

AVRO_PLUGIN_ID = "avro"


class AvroPlugin:
    """
    Applies Avro code generation to a project

    Every source grouping, existing or created later, gets its generation
    steps. Applying the plugin twice to one project is a no-op.
    """

    def __init__(self):
        self.project: Optional[Project] = None
        self.configurator: Optional[PipelineConfigurator] = None
        self.wirer: Optional[DependencyWirer] = None
        self.reconciler: Optional[IDEReconciler] = None

    def apply(self, project: Project):
        if project.toolchains.has(AVRO_PLUGIN_ID):
            logger.info(f"[AvroPlugin] Already applied to project {project.name}")
            return

        project.apply_java()
        project.extensions.setdefault(AVRO_EXTENSION_NAME, AvroExtension())

        self.project = project
        self.configurator = PipelineConfigurator(project)
        self.wirer = DependencyWirer(project)
        self.reconciler = IDEReconciler(project, self.configurator.handles)

        project.groupings.configure_each(self._configure_grouping)
        project.toolchains.on_toolchain_present(IDE_TOOLCHAIN, lambda _: self._configure_ide())
        project.toolchains.apply(AVRO_PLUGIN_ID)
        logger.info(f"[AvroPlugin] Applied to project {project.name}")

    def _configure_grouping(self, grouping: SourceGrouping):
        source_handle = self.configurator.configure(grouping)
        self.wirer.wire(grouping, source_handle)

    def _configure_ide(self):
        self.project.ide.before_generation(self._reconcile_module)
        # do-first also covers hooks registered ahead of this one
        self.project.steps.configure_each(
            IdeModuleStep,
            lambda step: step.do_first(self.reconciler.ensure_output_dirs)
        )

    def _reconcile_module(self, module):
        self.reconciler.ensure_output_dirs()
        self.reconciler.reconcile(module)


def apply_plugin(project: Project) -> AvroPlugin:
    """
    Apply the Avro plugin to a project (convenience function)

    Returns:
        The applied plugin
    """
    plugin = AvroPlugin()
    plugin.apply(project)
    return plugin


__all__ = ["AvroPlugin", "apply_plugin", "AVRO_PLUGIN_ID"]

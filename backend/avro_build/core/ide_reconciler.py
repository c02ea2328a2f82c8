"""
IDE Reconciler - Generated directories in the IDE module model

Responsibilities:
- Add the main/test definition directories and generated source
  directories to the module's source roots
- Replace the blanket build-directory exclude with one exclude per
  non-generated child of the build directory
- Create generated source directories before the model is finalized

The IDE refuses source roots nested beneath an excluded directory, and the
generated output lives under the build directory. So the build directory
itself cannot be excluded; build noise directly under it still is, one
directory at a time.
"""
import logging
from pathlib import Path
from typing import FrozenSet, Iterable, List, Mapping

from config import MAIN_GROUPING_NAME, TEST_GROUPING_NAME
from avro_build.core.conventions import definition_dir, is_generated_dir_name
from avro_build.core.project import ConfigurationError, Project, StepHandle
from avro_build.core.steps import GenerateSourceStep
from avro_build.schemas import IdeModule

logger = logging.getLogger(__name__)


class ReconciliationFailure(Exception):
    """Raised when a generated source directory cannot be created for the IDE"""
    pass


def merge_dirs(
    existing: Iterable[Path],
    additions: Iterable[Path] = (),
    removals: Iterable[Path] = ()
) -> FrozenSet[Path]:
    """(existing - removals) | additions"""
    removed = {Path(d) for d in removals}
    kept = {Path(d) for d in existing if Path(d) not in removed}
    return frozenset(kept | {Path(d) for d in additions})


def non_generated_children(build_dir: Path) -> List[Path]:
    """Immediate child directories of build_dir not named generated-*; empty if build_dir is missing"""
    build_dir = Path(build_dir)
    if not build_dir.is_dir():
        return []
    return sorted(
        child for child in build_dir.iterdir()
        if child.is_dir() and not is_generated_dir_name(child.name)
    )


class IDEReconciler:
    """
    Recomputes an IDE module's directory sets

    Args:
        project: Project the module belongs to
        source_handles: Source step handles by grouping name (read at
            reconcile time, so groupings configured later are included)
    """

    def __init__(self, project: Project, source_handles: Mapping[str, StepHandle]):
        self.project = project
        self.source_handles = source_handles

    def grouping_dirs(self, grouping_name: str) -> List[Path]:
        """Definition directory and generated source directory of a grouping"""
        grouping = self.project.groupings.get_by_name(grouping_name)
        handle = self.source_handles.get(grouping.name)
        if handle is None:
            raise ConfigurationError(f"No Avro source step configured for grouping '{grouping.name}'.")
        output_dir = self.project.file(handle.get().output_dir.get())
        return [definition_dir(self.project.project_dir, grouping.name), output_dir]

    def reconcile(self, module: IdeModule) -> IdeModule:
        build_dir = self.project.build_directory().get()

        module.source_dirs = set(merge_dirs(module.source_dirs, self.grouping_dirs(MAIN_GROUPING_NAME)))
        module.test_source_dirs = set(merge_dirs(module.test_source_dirs, self.grouping_dirs(TEST_GROUPING_NAME)))
        module.exclude_dirs = set(merge_dirs(
            module.exclude_dirs,
            additions=non_generated_children(build_dir),
            removals=[build_dir],
        ))

        logger.info(f"[IDEReconciler] Reconciled module {module.name}: excluding {len(module.exclude_dirs)} dirs")
        return module

    def ensure_output_dirs(self, step=None) -> List[Path]:
        """
        Create the output directory of every registered source step

        Raises:
            ReconciliationFailure: If a directory cannot be created
        """
        created = []
        for source_step in self.project.steps.with_type(GenerateSourceStep):
            directory = self.project.file(source_step.output_dir.get())
            try:
                self.project.mkdir(directory)
            except OSError as e:
                raise ReconciliationFailure(
                    f"Could not create generated source directory {directory} for {source_step.name}: {e}"
                ) from e
            created.append(directory)
        return created


__all__ = ["IDEReconciler", "ReconciliationFailure", "merge_dirs", "non_generated_children"]

"""
Project Model - The host side of the build configuration

Responsibilities:
- Register named steps lazily, rejecting duplicate names
- Hold source groupings (main, test, ...) and their source directories
- Track which toolchains are present and notify listeners when one appears
- Map (grouping, role) to the compile step that plays that role
- Provide the build directory and dependency configurations

This model only declares steps and the edges between them. Scheduling and
executing a build graph is left to whatever drives the project.
"""
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from config import (
    DEFAULT_BUILD_DIR_NAME,
    IDE_TOOLCHAIN,
    JAVA_TOOLCHAIN,
    KOTLIN_TOOLCHAIN,
    MAIN_GROUPING_NAME,
    RUNTIME_CLASSPATH_CONFIGURATION_NAME,
    TEST_GROUPING_NAME,
)
from avro_build.core.conventions import capitalize, compile_step_name
from avro_build.core.provider import Property, Provider, unwrap
from avro_build.schemas import StepInfo
from avro_build.tools.schema_compiler import AvroToolsCompiler

logger = logging.getLogger(__name__)

S = TypeVar("S")


class ConfigurationError(Exception):
    """Raised when the build configuration is invalid (duplicate or missing names)"""
    pass


class StepHandle(Generic[S]):
    """
    Lazy reference to a registered step

    The step object is only created (and its configuration actions run) the
    first time get() is called.
    """

    def __init__(self, project: "Project", name: str, step_type: Type[S]):
        self.project = project
        self.name = name
        self.step_type = step_type
        self._actions: List[Callable[[S], None]] = []
        self._step: Optional[S] = None

    @property
    def is_realized(self) -> bool:
        return self._step is not None

    def configure(self, action: Callable[[S], None]):
        """Run action against the step now if it exists, else when it is created"""
        if self._step is not None:
            action(self._step)
        else:
            self._actions.append(action)

    def get(self) -> S:
        if self._step is None:
            logger.debug(f"[StepContainer] Realizing step {self.name}")
            step = self.step_type(self.name, self.project)
            self._step = step
            actions, self._actions = self._actions, []
            for action in actions:
                action(step)
        return self._step

    def map(self, transform: Callable[[S], Any]) -> Provider:
        """Provider of a value read from the step; realizes it only when read"""
        return Provider(lambda: transform(self.get()), f"{self.name} output")

    def __repr__(self):
        return f"StepHandle({self.name}, {self.step_type.__name__})"


class StepContainer:
    """All steps registered on a project, keyed by unique name"""

    def __init__(self, project: "Project"):
        self.project = project
        self._handles: Dict[str, StepHandle] = {}
        self._type_actions: List[Tuple[type, Callable]] = []

    def register(self, name: str, step_type: Type[S], configure: Optional[Callable[[S], None]] = None) -> StepHandle[S]:
        """
        Register a step without creating it

        Raises:
            ConfigurationError: If a step with this name already exists
        """
        if name in self._handles:
            raise ConfigurationError(
                f"Cannot add step '{name}' as a step with that name already exists in project '{self.project.name}'."
            )
        handle = StepHandle(self.project, name, step_type)
        if configure:
            handle.configure(configure)
        for action_type, action in self._type_actions:
            if issubclass(step_type, action_type):
                handle.configure(action)
        self._handles[name] = handle
        logger.debug(f"[StepContainer] Registered {name} ({step_type.__name__})")
        return handle

    def named(self, name: str, configure: Optional[Callable] = None) -> StepHandle:
        """
        Look up a registered step, optionally adding a configuration action

        Raises:
            ConfigurationError: If no step has this name
        """
        handle = self._handles.get(name)
        if handle is None:
            raise ConfigurationError(f"Step with name '{name}' not found in project '{self.project.name}'.")
        if configure:
            handle.configure(configure)
        return handle

    def find(self, name: str) -> Optional[StepHandle]:
        return self._handles.get(name)

    def configure_each(self, step_type: type, action: Callable):
        """Configure every step of this type, existing or registered later, when it is realized"""
        self._type_actions.append((step_type, action))
        for handle in self._handles.values():
            if issubclass(handle.step_type, step_type):
                handle.configure(action)

    def with_type(self, step_type: Type[S]) -> List[S]:
        """Realize and return every step of this type registered so far"""
        return [
            handle.get() for handle in list(self._handles.values())
            if issubclass(handle.step_type, step_type)
        ]

    def names(self) -> List[str]:
        return list(self._handles.keys())

    def describe(self, name: str) -> StepInfo:
        """Get metadata about a step (realizes it)"""
        handle = self.named(name)
        step = handle.get()
        return StepInfo(
            name=name,
            kind=step.kind,
            description=step.description,
            group=step.group,
            depends_on=[dependency.name for dependency in step.depends_on],
            realized=handle.is_realized,
        )

    def __contains__(self, name: str) -> bool:
        return name in self._handles

    def __len__(self) -> int:
        return len(self._handles)


class SourceGrouping:
    """A named set of source directories compiled by one primary compile step"""

    def __init__(self, name: str, project: "Project"):
        self.name = name
        self.project = project
        self.compile_step_name = compile_step_name(name, JAVA_TOOLCHAIN)
        self.source_dirs: List[Union[Path, Provider]] = []

    def src_dir(self, directory: Union[Path, str, Provider]):
        """Add a source directory (a path or a provider of one)"""
        if directory not in self.source_dirs:
            self.source_dirs.append(directory)

    def resolved_source_dirs(self) -> List[Path]:
        resolved = []
        for directory in self.source_dirs:
            value = unwrap(directory)
            if value is None:
                continue
            path = self.project.file(value)
            if path not in resolved:
                resolved.append(path)
        return resolved

    def __repr__(self):
        return f"SourceGrouping({self.name})"


class SourceGroupingContainer:
    """Source groupings of a project; actions run for existing and future groupings"""

    def __init__(self, project: "Project"):
        self.project = project
        self._groupings: Dict[str, SourceGrouping] = {}
        self._actions: List[Callable[[SourceGrouping], None]] = []

    def create(self, name: str) -> SourceGrouping:
        if name in self._groupings:
            raise ConfigurationError(f"Cannot add source grouping '{name}' as one with that name already exists.")
        grouping = SourceGrouping(name, self.project)
        self._groupings[name] = grouping
        logger.info(f"[Project] Created source grouping {name}")
        for action in list(self._actions):
            action(grouping)
        return grouping

    def maybe_create(self, name: str) -> SourceGrouping:
        return self._groupings.get(name) or self.create(name)

    def get_by_name(self, name: str) -> SourceGrouping:
        if name not in self._groupings:
            raise ConfigurationError(f"Source grouping with name '{name}' not found in project '{self.project.name}'.")
        return self._groupings[name]

    def configure_each(self, action: Callable[[SourceGrouping], None]):
        self._actions.append(action)
        for grouping in list(self._groupings.values()):
            action(grouping)

    def names(self) -> List[str]:
        return list(self._groupings.keys())

    def __iter__(self) -> Iterator[SourceGrouping]:
        return iter(list(self._groupings.values()))

    def __contains__(self, name: str) -> bool:
        return name in self._groupings


class ToolchainRegistry:
    """
    Presence-reactive registry of applied toolchains

    on_toolchain_present() fires synchronously when the toolchain is already
    applied, or later when it is applied. It never fires otherwise.
    """

    def __init__(self):
        self._applied: List[str] = []
        self._listeners: Dict[str, List[Callable[[str], None]]] = {}

    def has(self, toolchain_id: str) -> bool:
        return toolchain_id in self._applied

    def apply(self, toolchain_id: str):
        if self.has(toolchain_id):
            return
        self._applied.append(toolchain_id)
        logger.info(f"[ToolchainRegistry] Applied toolchain {toolchain_id}")
        for callback in self._listeners.pop(toolchain_id, []):
            callback(toolchain_id)

    def on_toolchain_present(self, toolchain_id: str, callback: Callable[[str], None]):
        if self.has(toolchain_id):
            callback(toolchain_id)
        else:
            self._listeners.setdefault(toolchain_id, []).append(callback)

    def applied(self) -> List[str]:
        return list(self._applied)


class RoleRegistry:
    """Explicit mapping of (grouping name, role) to the step playing that role"""

    def __init__(self):
        self._handles: Dict[Tuple[str, str], StepHandle] = {}
        self._waiting: Dict[Tuple[str, str], List[Callable[[StepHandle], None]]] = {}

    def register(self, grouping_name: str, role: str, handle: StepHandle):
        key = (grouping_name, role)
        if key in self._handles:
            raise ConfigurationError(
                f"Grouping '{grouping_name}' already has a '{role}' step: {self._handles[key].name}"
            )
        self._handles[key] = handle
        for callback in self._waiting.pop(key, []):
            callback(handle)

    def find(self, grouping_name: str, role: str) -> Optional[StepHandle]:
        return self._handles.get((grouping_name, role))

    def when_registered(self, grouping_name: str, role: str, callback: Callable[[StepHandle], None]):
        handle = self.find(grouping_name, role)
        if handle is not None:
            callback(handle)
        else:
            self._waiting.setdefault((grouping_name, role), []).append(callback)


class Project:
    """
    A buildable project

    Toolchains are applied through apply_java(), apply_kotlin() and
    apply_ide(); each is a no-op when already applied.
    """

    def __init__(self, project_dir: Path, name: Optional[str] = None):
        self.project_dir = Path(project_dir)
        self.name = name or self.project_dir.name
        self.build_dir: Property[Path] = Property(f"build directory of project '{self.name}'")
        self.build_dir.convention(self.project_dir / DEFAULT_BUILD_DIR_NAME)

        self.steps = StepContainer(self)
        self.groupings = SourceGroupingContainer(self)
        self.toolchains = ToolchainRegistry()
        self.roles = RoleRegistry()

        self.configurations: Dict[str, List[Path]] = {}
        self.extensions: Dict[str, Any] = {}
        self.schema_compiler = Property("schema compiler").convention(Provider(AvroToolsCompiler))
        self.ide = None

    def file(self, path: Union[Path, str]) -> Path:
        """Resolve a path relative to the project directory"""
        path = Path(path)
        return path if path.is_absolute() else self.project_dir / path

    def build_directory(self) -> Provider[Path]:
        return self.build_dir.map(self.file)

    def mkdir(self, path: Union[Path, str, Provider]) -> Path:
        directory = self.file(unwrap(path))
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def configuration(self, name: str) -> Provider[List[Path]]:
        """
        Lazy view of a dependency configuration's files

        Raises:
            ConfigurationError: If the configuration does not exist
        """
        if name not in self.configurations:
            raise ConfigurationError(f"Configuration with name '{name}' not found in project '{self.name}'.")
        return Provider(lambda: [self.file(p) for p in self.configurations[name]], f"configuration '{name}'")

    def apply_java(self):
        """Java toolchain: main/test groupings, each with a compile<Grouping>Java step"""
        if self.toolchains.has(JAVA_TOOLCHAIN):
            return
        self.configurations.setdefault(RUNTIME_CLASSPATH_CONFIGURATION_NAME, [])
        self.groupings.configure_each(self._apply_java_conventions)
        self.groupings.maybe_create(MAIN_GROUPING_NAME)
        self.groupings.maybe_create(TEST_GROUPING_NAME)
        self.toolchains.apply(JAVA_TOOLCHAIN)

    def apply_kotlin(self):
        """Kotlin toolchain: a compile<Grouping>Kotlin step per grouping"""
        if self.toolchains.has(KOTLIN_TOOLCHAIN):
            return
        self.apply_java()
        self.groupings.configure_each(lambda grouping: self._register_compile_step(grouping, KOTLIN_TOOLCHAIN))
        self.toolchains.apply(KOTLIN_TOOLCHAIN)

    def apply_ide(self):
        """IDE integration: an IDE module model generated by the ideaModule step"""
        if self.toolchains.has(IDE_TOOLCHAIN):
            return
        from avro_build.core.ide import IdePlugin
        self.ide = IdePlugin(self)
        self.toolchains.apply(IDE_TOOLCHAIN)

    def _apply_java_conventions(self, grouping: SourceGrouping):
        grouping.src_dir(Path("src") / grouping.name / JAVA_TOOLCHAIN)
        self._register_compile_step(grouping, JAVA_TOOLCHAIN)

    def _register_compile_step(self, grouping: SourceGrouping, language: str) -> StepHandle:
        from avro_build.core.steps import CompileStep

        def configure(step):
            step.description = f"Compiles {grouping.name} {capitalize(language)} source."
            step.language = language
            step.source(Provider(grouping.resolved_source_dirs, f"{grouping.name} source directories"))

        handle = self.steps.register(compile_step_name(grouping.name, language), CompileStep, configure)
        self.roles.register(grouping.name, language, handle)
        return handle

    def __repr__(self):
        return f"Project({self.name})"


__all__ = [
    "ConfigurationError",
    "StepHandle",
    "StepContainer",
    "SourceGrouping",
    "SourceGroupingContainer",
    "ToolchainRegistry",
    "RoleRegistry",
    "Project",
]

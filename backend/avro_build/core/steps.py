"""
Steps - Units of work registered on a project

Responsibilities:
- Collect input roots and include filters (source steps)
- Record the steps whose outputs they consume (implicit dependency edges)
- Run do-first actions before their own work
- Generation steps hand their filtered inputs to the schema compiler

A step never runs other steps; ordering them is the job of whatever
executes the build.
"""
import fnmatch
import logging
import shutil
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from config import PROTOCOL_EXTENSION, SCHEMA_EXTENSION, JAVA_EXTENSION
from avro_build.core.project import StepHandle
from avro_build.core.provider import Property, unwrap
from avro_build.schemas import (
    AvroExtension,
    CompileOptions,
    GenerationResult,
    StepKind,
    StepStatus,
)

logger = logging.getLogger(__name__)


class Step:
    """Base step: metadata, dependency edges and do-first/do-last actions"""

    kind = StepKind.GENERIC

    def __init__(self, name: str, project):
        self.name = name
        self.project = project
        self.description: Optional[str] = None
        self.group: Optional[str] = None
        self.depends_on: List[StepHandle] = []
        self.status = StepStatus.PENDING
        self.error_message: Optional[str] = None
        self._do_first: List[Callable[["Step"], None]] = []
        self._do_last: List[Callable[["Step"], None]] = []

    def do_first(self, action: Callable[["Step"], None]):
        self._do_first.insert(0, action)

    def do_last(self, action: Callable[["Step"], None]):
        self._do_last.append(action)

    def depend_on(self, handle: StepHandle):
        if handle not in self.depends_on:
            self.depends_on.append(handle)

    @property
    def outputs(self) -> List[Path]:
        return []

    def execute(self) -> Any:
        """
        Run do-first actions, the step's own work, then do-last actions

        Dependencies are not executed; the caller runs steps in order.
        """
        self.status = StepStatus.RUNNING
        try:
            for action in self._do_first:
                action(self)
            result = self.run()
            for action in self._do_last:
                action(self)
        except Exception as e:
            self.status = StepStatus.FAILED
            self.error_message = str(e)
            logger.error(f"[{self.name}] ✗ Failed: {e}")
            raise
        self.status = StepStatus.COMPLETED
        return result

    def run(self) -> Any:
        return None

    def __repr__(self):
        return f"{type(self).__name__}({self.name})"


def clean_output_dir(project, output_dir: Property) -> Path:
    """Empty and recreate a generation output directory so removed inputs leave no outputs behind"""
    directory = project.file(output_dir.get())
    shutil.rmtree(directory, ignore_errors=True)
    return project.mkdir(directory)


def matches_include(relative_path: str, pattern: str) -> bool:
    """Ant-style match where a leading '**/' also matches files at the root"""
    if fnmatch.fnmatchcase(relative_path, pattern):
        return True
    return pattern.startswith("**/") and fnmatch.fnmatchcase(relative_path, pattern[3:])


class SourceStep(Step):
    """Step with a set of input roots filtered by include patterns"""

    def __init__(self, name: str, project):
        super().__init__(name, project)
        self._sources: List[Any] = []
        self.includes: List[str] = []

    def source(self, *sources):
        """
        Add input roots: paths, providers, or handles of other steps

        A step handle contributes that step's outputs and makes this step
        depend on it.
        """
        for source in sources:
            if isinstance(source, StepHandle):
                self.depend_on(source)
            self._sources.append(source)

    def include(self, *patterns: str):
        self.includes.extend(patterns)

    def source_roots(self) -> List[Path]:
        """Resolve every input root (realizing upstream steps if needed)"""
        roots: List[Path] = []
        for source in self._sources:
            if isinstance(source, StepHandle):
                values = source.get().outputs
            else:
                values = unwrap(source)
            if values is None:
                continue
            if not isinstance(values, (list, tuple, set, frozenset)):
                values = [values]
            for value in values:
                root = self.project.file(unwrap(value))
                if root not in roots:
                    roots.append(root)
        return roots

    def source_tree(self) -> List[Tuple[Path, Path]]:
        """(root, relative path) of every existing input file passing the include filters"""
        found = []
        seen = set()
        for root in self.source_roots():
            if not root.is_dir():
                continue
            for path in sorted(root.rglob("*")):
                if not path.is_file():
                    continue
                relative = path.relative_to(root)
                if self.includes and not any(matches_include(relative.as_posix(), p) for p in self.includes):
                    continue
                if path not in seen:
                    seen.add(path)
                    found.append((root, relative))
        return found

    def source_files(self) -> List[Path]:
        return [root / relative for root, relative in self.source_tree()]


class CompileStep(SourceStep):
    """A language compiler's step; compilation itself belongs to the host toolchain"""

    kind = StepKind.COMPILE

    def __init__(self, name: str, project):
        super().__init__(name, project)
        self.language: Optional[str] = None
        self.encoding: Optional[str] = None


class GenerateProtocolStep(SourceStep):
    """Compiles interface-definition (.avdl) files to protocol (.avpr) files"""

    kind = StepKind.PROTOCOL_GENERATION

    def __init__(self, name: str, project):
        super().__init__(name, project)
        self.output_dir: Property[Path] = Property(f"output directory of {name}")
        self.classpath: Property[List[Path]] = Property(f"classpath of {name}")

    @property
    def outputs(self) -> List[Path]:
        return [self.project.file(self.output_dir.get())]

    def run(self) -> GenerationResult:
        output_dir = clean_output_dir(self.project, self.output_dir)
        compiler = self.project.schema_compiler.get()
        classpath = self.classpath.get_or_none() or []
        tree = self.source_tree()
        logger.info(f"[{self.name}] Compiling {len(tree)} IDL files into {output_dir}")

        generated = []
        for root, relative in tree:
            output_file = output_dir / relative.with_suffix(f".{PROTOCOL_EXTENSION}")
            output_file.parent.mkdir(parents=True, exist_ok=True)
            compiler.compile_idl(root / relative, output_file, classpath)
            generated.append(output_file)

        return GenerationResult(
            step_name=self.name,
            output_dir=output_dir,
            inputs=[root / relative for root, relative in tree],
            generated_files=generated,
        )


class GenerateSourceStep(SourceStep):
    """Compiles schema (.avsc) and protocol (.avpr) files to Java sources"""

    kind = StepKind.SOURCE_GENERATION

    def __init__(self, name: str, project):
        super().__init__(name, project)
        self.output_dir: Property[Path] = Property(f"output directory of {name}")
        self.output_character_encoding: Property[str] = Property(f"output character encoding of {name}")
        self.settings: Property[AvroExtension] = Property(f"code generation settings of {name}")
        self.settings.convention(AvroExtension())

    @property
    def outputs(self) -> List[Path]:
        return [self.project.file(self.output_dir.get())]

    def compile_options(self) -> CompileOptions:
        settings = self.settings.get()
        return CompileOptions(encoding=self.output_character_encoding.get(), **settings.model_dump(exclude={"encoding"}))

    def run(self) -> GenerationResult:
        output_dir = clean_output_dir(self.project, self.output_dir)
        compiler = self.project.schema_compiler.get()
        files = self.source_files()
        schemas = [f for f in files if f.suffix == f".{SCHEMA_EXTENSION}"]
        protocols = [f for f in files if f.suffix == f".{PROTOCOL_EXTENSION}"]
        logger.info(f"[{self.name}] Compiling {len(schemas)} schemas and {len(protocols)} protocols into {output_dir}")

        options = self.compile_options()
        if schemas:
            compiler.compile_schemas("schema", schemas, output_dir, options)
        if protocols:
            compiler.compile_schemas("protocol", protocols, output_dir, options)

        generated = sorted(output_dir.rglob(f"*.{JAVA_EXTENSION}"))
        logger.info(f"[{self.name}] ✓ Generated {len(generated)} source files")
        return GenerationResult(
            step_name=self.name,
            output_dir=output_dir,
            inputs=files,
            generated_files=generated,
        )


class IdeModuleStep(Step):
    """Generates the IDE module model"""

    kind = StepKind.IDE_MODULE

    def __init__(self, name: str, project):
        super().__init__(name, project)
        self.plugin = None

    def run(self):
        return self.plugin.generate()


__all__ = [
    "Step",
    "SourceStep",
    "CompileStep",
    "GenerateProtocolStep",
    "GenerateSourceStep",
    "IdeModuleStep",
    "matches_include",
]

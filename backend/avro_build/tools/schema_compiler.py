"""
Schema Compiler - avro-tools wrapper

Responsibilities:
- Compile an interface-definition (.avdl) file to a protocol (.avpr) file
- Compile schema (.avsc) or protocol (.avpr) files to Java sources
- Capture compiler output and report failures with the offending files

Parsing and code generation are done entirely by avro-tools; this module
only builds command lines and runs them.
"""
import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from config import JAVA_BIN, SCHEMA_COMPILER_TIMEOUT, resolve_avro_tools_jar
from avro_build.schemas import CompileOptions

logger = logging.getLogger(__name__)

AVRO_TOOLS_MAIN_CLASS = "org.apache.avro.tool.Main"
COMPILE_KINDS = ("schema", "protocol")


class GenerationFailure(Exception):
    """Raised when the schema compiler rejects its input"""

    def __init__(self, message: str, sources: Sequence[Path] = (), output: str = ""):
        super().__init__(message)
        self.sources = [Path(s) for s in sources]
        self.output = output


class SchemaCompiler(Protocol):
    """What generation steps need from a schema compiler"""

    def compile_idl(self, source: Path, output_file: Path, classpath: Sequence[Path]) -> Path:
        ...

    def compile_schemas(self, kind: str, sources: Sequence[Path], output_dir: Path, options: CompileOptions) -> None:
        ...


class AvroToolsCompiler:
    """
    Runs the avro-tools jar with a Java executable

    The jar defaults to AVRO_TOOLS_JAR; it is only required once a
    command is actually built.
    """

    def __init__(
        self,
        tools_jar: Optional[Path] = None,
        java_bin: str = JAVA_BIN,
        timeout: int = SCHEMA_COMPILER_TIMEOUT
    ):
        self.tools_jar = Path(tools_jar) if tools_jar else None
        self.java_bin = java_bin
        self.timeout = timeout

    def _jar(self) -> Path:
        if self.tools_jar is None:
            try:
                self.tools_jar = resolve_avro_tools_jar()
            except ValueError as e:
                raise GenerationFailure(f"Schema compiler is not configured: {e}") from e
        return self.tools_jar

    def idl_command(self, source: Path, output_file: Path, classpath: Sequence[Path] = ()) -> List[str]:
        """IDL imports are resolved against the classpath, so avro-tools runs with it"""
        entries = [str(self._jar())] + [str(entry) for entry in classpath]
        return [
            self.java_bin, "-cp", os.pathsep.join(entries), AVRO_TOOLS_MAIN_CLASS,
            "idl", str(source), str(output_file)
        ]

    def compile_command(self, kind: str, sources: Sequence[Path], output_dir: Path, options: CompileOptions) -> List[str]:
        if kind not in COMPILE_KINDS:
            raise ValueError(f"Unknown compile kind '{kind}'. Expected one of: {', '.join(COMPILE_KINDS)}")
        command = [self.java_bin, "-jar", str(self._jar()), "compile", "-encoding", options.encoding]
        if options.string_type:
            command.append("-string")
        if options.enable_decimal_logical_type:
            command.append("-bigDecimal")
        command += ["-fieldVisibility", options.field_visibility.value]
        if options.template_directory:
            command += ["-templateDir", str(options.template_directory)]
        command.append(kind)
        command += [str(source) for source in sources]
        command.append(str(output_dir))
        return command

    def compile_idl(self, source: Path, output_file: Path, classpath: Sequence[Path] = ()) -> Path:
        self._run(self.idl_command(source, output_file, classpath), [source])
        return output_file

    def compile_schemas(self, kind: str, sources: Sequence[Path], output_dir: Path, options: CompileOptions) -> None:
        self._run(self.compile_command(kind, sources, output_dir, options), sources)

    def _run(self, command: List[str], sources: Sequence[Path]):
        names = ", ".join(Path(s).name for s in sources)
        logger.debug(f"[SchemaCompiler] Running: {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise GenerationFailure(f"Schema compiler timed out after {self.timeout}s on {names}", sources)
        except OSError as e:
            raise GenerationFailure(f"Could not run schema compiler ({self.java_bin}): {e}", sources) from e

        if result.returncode != 0:
            output = (result.stderr or result.stdout or "").strip()
            logger.error(f"[SchemaCompiler] ✗ Failed with exit code {result.returncode} on {names}")
            logger.error("[SchemaCompiler] " + output[-1000:])  # Last 1000 chars
            raise GenerationFailure(f"Schema compilation failed for {names}:\n{output}", sources, output)


__all__ = ["SchemaCompiler", "AvroToolsCompiler", "GenerationFailure", "COMPILE_KINDS"]

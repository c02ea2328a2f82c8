"""
Tests for generation steps

The schema compiler is replaced by a recorder that writes the files
avro-tools would write.
"""
import pytest
import tempfile
import shutil
from pathlib import Path

from avro_build.core.plugin import apply_plugin
from avro_build.core.project import Project
from avro_build.core.steps import matches_include
from avro_build.schemas import StepStatus
from avro_build.tools import GenerationFailure


class RecordingCompiler:
    """Stands in for avro-tools; records calls and writes placeholder outputs"""

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    def compile_idl(self, source, output_file, classpath=()):
        self.calls.append(("idl", source, output_file, list(classpath)))
        if self.fail_on and source.name == self.fail_on:
            raise GenerationFailure(f"{source}:3: unexpected token", [source])
        output_file.write_text('{"protocol": "Placeholder"}')
        return output_file

    def compile_schemas(self, kind, sources, output_dir, options):
        self.calls.append((kind, list(sources), output_dir, options))
        for source in sources:
            (output_dir / f"{source.stem.capitalize()}.java").write_text("// generated")


class TestIncludeFilters:
    """Test include pattern matching"""

    def test_double_star_matches_root_and_nested(self):
        assert matches_include("user.avsc", "**/*.avsc")
        assert matches_include("com/example/user.avsc", "**/*.avsc")
        assert not matches_include("com/example/user.avdl", "**/*.avsc")


class TestGenerationSteps:
    """Test running the protocol and source steps"""

    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory"""
        temp = Path(tempfile.mkdtemp())
        yield temp
        if temp.exists():
            shutil.rmtree(temp)

    @pytest.fixture
    def compiler(self):
        return RecordingCompiler()

    @pytest.fixture
    def project(self, temp_dir, compiler):
        """Create a project with definition files for the main grouping"""
        project = Project(temp_dir / "app")
        apply_plugin(project)
        project.schema_compiler.set(compiler)

        avro_dir = project.project_dir / "src" / "main" / "avro"
        (avro_dir / "com" / "example").mkdir(parents=True)
        (avro_dir / "com" / "example" / "service.avdl").write_text("protocol Service {}")
        (avro_dir / "user.avsc").write_text('{"type": "record", "name": "User", "fields": []}')
        (avro_dir / "notes.txt").write_text("ignored")
        return project

    def test_source_tree_filters(self, project):
        protocol_step = project.steps.named("generateMainProtocol").get()
        assert [rel.as_posix() for _, rel in protocol_step.source_tree()] == ["com/example/service.avdl"]

    def test_protocol_step_run(self, project, compiler):
        """Test that each IDL file becomes a protocol file under the output dir"""
        project.configurations["runtimeClasspath"].append(Path("libs/common.jar"))
        result = project.steps.named("generateMainProtocol").get().execute()

        output_dir = project.build_dir.get() / "generated-main-avro-protocol"
        expected = output_dir / "com" / "example" / "service.avpr"
        assert result.generated_files == [expected]
        assert expected.exists()
        assert compiler.calls[0][3] == [project.project_dir / "libs" / "common.jar"]

    def test_source_step_compiles_schemas_and_protocols(self, project, compiler):
        """Test that the source step picks up protocols generated by the protocol step"""
        project.steps.named("generateMainProtocol").get().execute()
        source_step = project.steps.named("generateMainSource").get()
        result = source_step.execute()

        kinds = [call[0] for call in compiler.calls]
        assert kinds == ["idl", "schema", "protocol"]
        schema_call = compiler.calls[1]
        protocol_call = compiler.calls[2]
        assert [p.name for p in schema_call[1]] == ["user.avsc"]
        assert [p.name for p in protocol_call[1]] == ["service.avpr"]
        assert schema_call[3].encoding == source_step.output_character_encoding.get()

        assert source_step.status == StepStatus.COMPLETED
        assert sorted(p.name for p in result.generated_files) == ["Service.java", "User.java"]

    def test_source_step_without_inputs(self, project, compiler):
        """Test that a grouping with no definition files generates nothing"""
        result = project.steps.named("generateTestSource").get().execute()
        assert compiler.calls == []
        assert result.generated_files == []
        assert result.output_dir.is_dir()

    def test_removed_schema_output_is_not_kept(self, project):
        """Test that regenerating after deleting a schema drops its Java source"""
        avro_dir = project.project_dir / "src" / "main" / "avro"
        (avro_dir / "order.avsc").write_text('{"type": "record", "name": "Order", "fields": []}')
        source_step = project.steps.named("generateMainSource").get()
        output_dir = project.build_dir.get() / "generated-main-avro-source"

        source_step.execute()
        assert (output_dir / "Order.java").exists()

        (avro_dir / "order.avsc").unlink()
        result = source_step.execute()

        assert [p.name for p in result.generated_files] == ["User.java"]
        assert not (output_dir / "Order.java").exists()

    def test_removed_idl_output_is_not_kept(self, project):
        """Test that regenerating after deleting an IDL file drops its protocol"""
        avro_dir = project.project_dir / "src" / "main" / "avro"
        protocol_step = project.steps.named("generateMainProtocol").get()
        stale = project.build_dir.get() / "generated-main-avro-protocol" / "com" / "example" / "service.avpr"

        protocol_step.execute()
        assert stale.exists()

        (avro_dir / "com" / "example" / "service.avdl").unlink()
        result = protocol_step.execute()

        assert result.generated_files == []
        assert not stale.exists()
        assert result.output_dir.is_dir()

    def test_generation_failure_propagates(self, project):
        """Test that a compiler failure fails the step with source context"""
        project.schema_compiler.set(RecordingCompiler(fail_on="service.avdl"))
        protocol_step = project.steps.named("generateMainProtocol").get()

        with pytest.raises(GenerationFailure) as exc_info:
            protocol_step.execute()

        assert exc_info.value.sources[0].name == "service.avdl"
        assert protocol_step.status == StepStatus.FAILED
        assert "unexpected token" in protocol_step.error_message


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Tests for the Project model

Steps are registered lazily and names are unique; toolchain and role
listeners fire when their subject is (or becomes) present.
"""
import pytest
import tempfile
import shutil
from pathlib import Path

from avro_build.core.plugin import apply_plugin
from avro_build.core.project import Project, ConfigurationError, ToolchainRegistry, RoleRegistry
from avro_build.core.steps import Step, CompileStep, GenerateSourceStep


class TestStepContainer:
    """Test step registration"""

    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory"""
        temp = Path(tempfile.mkdtemp())
        yield temp
        if temp.exists():
            shutil.rmtree(temp)

    @pytest.fixture
    def project(self, temp_dir):
        return Project(temp_dir / "app")

    def test_registration_is_lazy(self, project):
        """Test that configuration actions run only when the step is realized"""
        calls = []
        handle = project.steps.register("hello", Step, lambda step: calls.append(step.name))
        assert calls == []
        assert not handle.is_realized

        step = handle.get()
        assert calls == ["hello"]
        assert handle.get() is step

    def test_duplicate_name_rejected(self, project):
        """Test that a second registration under the same name fails"""
        project.steps.register("hello", Step)
        with pytest.raises(ConfigurationError, match="hello"):
            project.steps.register("hello", Step)

    def test_named_missing_step(self, project):
        with pytest.raises(ConfigurationError, match="missing"):
            project.steps.named("missing")
        assert project.steps.find("missing") is None

    def test_configure_each_applies_to_future_steps(self, project):
        """Test that type-wide actions reach steps registered later"""
        seen = []
        project.steps.register("first", CompileStep)
        project.steps.configure_each(CompileStep, lambda step: seen.append(step.name))
        project.steps.register("second", CompileStep)
        project.steps.register("other", Step)

        assert seen == []
        project.steps.with_type(CompileStep)
        assert sorted(seen) == ["first", "second"]

    def test_describe(self, project):
        handle = project.steps.register("hello", Step, lambda step: setattr(step, "description", "Says hello"))
        info = project.steps.describe("hello")
        assert info.name == "hello"
        assert info.description == "Says hello"
        assert info.realized
        assert handle.is_realized


class TestGroupingsAndToolchains:
    """Test groupings, toolchain presence and roles"""

    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory"""
        temp = Path(tempfile.mkdtemp())
        yield temp
        if temp.exists():
            shutil.rmtree(temp)

    def test_apply_java_creates_groupings(self, temp_dir):
        """Test that the java toolchain adds main/test with compile steps"""
        project = Project(temp_dir)
        project.apply_java()

        assert project.groupings.names() == ["main", "test"]
        assert "compileMainJava" in project.steps
        assert "compileTestJava" in project.steps
        assert project.roles.find("main", "java").name == "compileMainJava"
        assert "runtimeClasspath" in project.configurations

    def test_apply_java_twice_is_noop(self, temp_dir):
        project = Project(temp_dir)
        project.apply_java()
        project.apply_java()
        assert len(project.steps) == 2

    def test_grouping_actions_reach_new_groupings(self, temp_dir):
        project = Project(temp_dir)
        project.apply_kotlin()
        project.groupings.create("integrationTest")

        assert "compileIntegrationTestJava" in project.steps
        assert "compileIntegrationTestKotlin" in project.steps

    def test_duplicate_grouping_rejected(self, temp_dir):
        project = Project(temp_dir)
        project.groupings.create("main")
        with pytest.raises(ConfigurationError):
            project.groupings.create("main")
        with pytest.raises(ConfigurationError):
            project.groupings.get_by_name("absent")

    def test_groupings_differing_only_in_case_collide(self, temp_dir):
        """Test that 'Main' next to 'main' fails on its step names"""
        project = Project(temp_dir)
        apply_plugin(project)

        with pytest.raises(ConfigurationError, match="compileMainJava"):
            project.groupings.create("Main")

    def test_toolchain_listener_fires_immediately_when_present(self):
        registry = ToolchainRegistry()
        registry.apply("kotlin")
        fired = []
        registry.on_toolchain_present("kotlin", fired.append)
        assert fired == ["kotlin"]

    def test_toolchain_listener_fires_once_when_applied_later(self):
        registry = ToolchainRegistry()
        fired = []
        registry.on_toolchain_present("kotlin", fired.append)
        assert fired == []
        registry.apply("kotlin")
        registry.apply("kotlin")
        assert fired == ["kotlin"]

    def test_toolchain_listener_never_fires_when_absent(self):
        registry = ToolchainRegistry()
        fired = []
        registry.on_toolchain_present("kotlin", fired.append)
        registry.apply("java")
        assert fired == []

    def test_role_registry(self, temp_dir):
        project = Project(temp_dir)
        registry = RoleRegistry()
        found = []
        registry.when_registered("main", "kotlin", found.append)
        handle = project.steps.register("compileMainKotlin", CompileStep)
        registry.register("main", "kotlin", handle)

        assert found == [handle]
        with pytest.raises(ConfigurationError):
            registry.register("main", "kotlin", handle)

    def test_configuration_lookup(self, temp_dir):
        project = Project(temp_dir)
        with pytest.raises(ConfigurationError, match="runtimeClasspath"):
            project.configuration("runtimeClasspath")

        project.configurations["runtimeClasspath"] = [Path("libs/a.jar")]
        classpath = project.configuration("runtimeClasspath")
        project.configurations["runtimeClasspath"].append(Path("/opt/b.jar"))
        assert classpath.get() == [temp_dir / "libs" / "a.jar", Path("/opt/b.jar")]

    def test_with_type_realizes_steps(self, temp_dir):
        project = Project(temp_dir)
        handle = project.steps.register("generateMainSource", GenerateSourceStep)
        steps = project.steps.with_type(GenerateSourceStep)
        assert handle.is_realized
        assert [s.name for s in steps] == ["generateMainSource"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

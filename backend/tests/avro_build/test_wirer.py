"""
Tests for DependencyWirer

Generated sources always reach the Java compile step; they reach the Kotlin
compile step only if the Kotlin toolchain is present and a Kotlin compile
step exists for the grouping.
"""
import pytest
import tempfile
import shutil
from pathlib import Path

from avro_build.core.plugin import apply_plugin
from avro_build.core.project import Project
from avro_build.core.steps import CompileStep
from avro_build.core.wirer import DependencyWirer


class TestDependencyWirer:
    """Test suite for DependencyWirer"""

    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory"""
        temp = Path(tempfile.mkdtemp())
        yield temp
        if temp.exists():
            shutil.rmtree(temp)

    def _generated(self, project, grouping="main"):
        return project.build_dir.get() / f"generated-{grouping}-avro-source"

    def test_no_secondary_toolchain(self, temp_dir):
        """Test that without Kotlin only the Java compile step is wired"""
        project = Project(temp_dir)
        apply_plugin(project)

        compile_step = project.steps.named("compileMainJava").get()
        assert compile_step.source_roots() == [project.file("src/main/java"), self._generated(project)]
        assert [h.name for h in compile_step.depends_on] == ["generateMainSource"]
        assert project.steps.find("compileMainKotlin") is None

    def test_secondary_toolchain_applied_first(self, temp_dir):
        """Test wiring when Kotlin is present before the plugin"""
        project = Project(temp_dir)
        project.apply_kotlin()
        apply_plugin(project)

        kotlin_step = project.steps.named("compileMainKotlin").get()
        assert self._generated(project) in kotlin_step.source_roots()
        assert project.steps.named("generateMainSource") in kotlin_step.depends_on

    def test_secondary_toolchain_applied_later(self, temp_dir):
        """Test wiring when Kotlin appears after the plugin"""
        project = Project(temp_dir)
        apply_plugin(project)
        project.apply_kotlin()

        for grouping in ["main", "test"]:
            kotlin_step = project.steps.named(f"compile{grouping.capitalize()}Kotlin").get()
            assert self._generated(project, grouping) in kotlin_step.source_roots()

    def test_toolchain_present_without_matching_step(self, temp_dir):
        """Test that a present toolchain with no compile step for the grouping wires nothing"""
        project = Project(temp_dir)
        project.apply_java()
        project.toolchains.apply("kotlin")
        apply_plugin(project)

        assert project.roles.find("main", "kotlin") is None
        assert project.steps.with_type(CompileStep) == [
            project.steps.named("compileMainJava").get(),
            project.steps.named("compileTestJava").get(),
        ]

    def test_step_registered_after_toolchain(self, temp_dir):
        """Test that the lookup waits for a compile step registered later"""
        project = Project(temp_dir)
        apply_plugin(project)
        project.toolchains.apply("kotlin")

        handle = project.steps.register("compileMainKotlin", CompileStep)
        project.roles.register("main", "kotlin", handle)

        assert self._generated(project) in handle.get().source_roots()

    def test_wire_custom_secondary_toolchain(self, temp_dir):
        project = Project(temp_dir)
        project.apply_java()
        grouping = project.groupings.get_by_name("main")
        source_handle = project.steps.register("generateExtraSource", CompileStep)

        DependencyWirer(project, secondary_toolchain="groovy").wire(grouping, source_handle)
        project.apply_kotlin()

        kotlin_step = project.steps.named("compileMainKotlin").get()
        assert source_handle not in kotlin_step.depends_on
        assert source_handle in project.steps.named("compileMainJava").get().depends_on


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

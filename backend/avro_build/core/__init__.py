"""
Core Plugin Components

These components build the generation pipeline of a project:
1. Provider - Lazy values
2. Conventions - Step names and directory paths
3. Project - Steps, groupings, toolchains (host model)
4. Steps - Generation and compile steps
5. PipelineConfigurator - Two generation steps per grouping
6. DependencyWirer - Generated sources → compile steps
7. IDEReconciler - IDE source/exclude roots
8. AvroPlugin - Applies all of the above
"""
from .provider import Provider, Property, MissingValueError
from .project import Project, ConfigurationError, StepHandle
from .steps import GenerateProtocolStep, GenerateSourceStep, CompileStep, IdeModuleStep
from .configurator import PipelineConfigurator
from .wirer import DependencyWirer
from .ide_reconciler import IDEReconciler, ReconciliationFailure, merge_dirs
from .ide import IdePlugin
from .plugin import AvroPlugin, apply_plugin

__all__ = [
    "Provider",
    "Property",
    "MissingValueError",
    "Project",
    "ConfigurationError",
    "StepHandle",
    "GenerateProtocolStep",
    "GenerateSourceStep",
    "CompileStep",
    "IdeModuleStep",
    "PipelineConfigurator",
    "DependencyWirer",
    "IDEReconciler",
    "ReconciliationFailure",
    "merge_dirs",
    "IdePlugin",
    "AvroPlugin",
    "apply_plugin",
]

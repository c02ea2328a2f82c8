"""
Avro Code Generation for JVM Build Projects
"""
from .core import AvroPlugin, Project, apply_plugin
from .tools import GenerationFailure

__all__ = [
    "AvroPlugin",
    "Project",
    "apply_plugin",
    "GenerationFailure",
]

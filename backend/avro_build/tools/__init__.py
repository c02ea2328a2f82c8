"""
Tools for Avro Code Generation

These tools are invoked by generation steps when they run:
- Schema compiler (avro-tools): IDL → protocol, schema/protocol → Java
"""
from .schema_compiler import SchemaCompiler, AvroToolsCompiler, GenerationFailure

__all__ = [
    "SchemaCompiler",
    "AvroToolsCompiler",
    "GenerationFailure",
]

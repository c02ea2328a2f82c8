"""
Extension Schema - Code generation options

The `avro` project extension lets a build script tune how Java sources are
generated. Generation steps read it lazily, when they run.
"""
from typing import Optional
from pathlib import Path
from enum import Enum
from pydantic import BaseModel, Field

from config import DEFAULT_FIELD_VISIBILITY


class FieldVisibility(str, Enum):
    """Visibility of fields in generated record classes"""
    PUBLIC = "PUBLIC"
    PUBLIC_DEPRECATED = "PUBLIC_DEPRECATED"
    PRIVATE = "PRIVATE"


class AvroExtension(BaseModel):
    """Project-wide settings for the schema compiler"""
    string_type: bool = Field(True, description="Generate java.lang.String instead of CharSequence")
    field_visibility: FieldVisibility = Field(FieldVisibility(DEFAULT_FIELD_VISIBILITY))
    enable_decimal_logical_type: bool = Field(True, description="Map decimal logical types to BigDecimal")
    template_directory: Optional[Path] = Field(None, description="Custom velocity templates")


class CompileOptions(AvroExtension):
    """Extension settings plus the resolved output encoding for one step run"""
    encoding: str = Field(..., description="Character encoding of generated source files")


__all__ = ["FieldVisibility", "AvroExtension", "CompileOptions"]

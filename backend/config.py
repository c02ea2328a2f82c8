"""
Configuration for the Avro code-generation build plugin
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Schema compiler (avro-tools) - override via environment variables
AVRO_TOOLS_JAR = os.getenv("AVRO_TOOLS_JAR")
JAVA_BIN = os.getenv("JAVA_BIN", "java")
SCHEMA_COMPILER_TIMEOUT = int(os.getenv("SCHEMA_COMPILER_TIMEOUT", "300"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# File extensions
IDL_EXTENSION = "avdl"
PROTOCOL_EXTENSION = "avpr"
SCHEMA_EXTENSION = "avsc"
JAVA_EXTENSION = "java"

# Step metadata
GROUP_SOURCE_GENERATION = "source generation"

# Directory layout
DEFAULT_BUILD_DIR_NAME = "build"
GENERATED_DIR_PREFIX = "generated-"
DEFINITION_DIR_TEMPLATE = "src/{grouping}/avro"

# Groupings created by the java toolchain
MAIN_GROUPING_NAME = "main"
TEST_GROUPING_NAME = "test"

# Toolchain identifiers
JAVA_TOOLCHAIN = "java"
KOTLIN_TOOLCHAIN = "kotlin"
IDE_TOOLCHAIN = "idea"

# Dependency configurations
RUNTIME_CLASSPATH_CONFIGURATION_NAME = "runtimeClasspath"

# Extension name registered on the project
AVRO_EXTENSION_NAME = "avro"

# Code generation defaults (see AvroExtension)
DEFAULT_FIELD_VISIBILITY = "PUBLIC_DEPRECATED"


def resolve_avro_tools_jar() -> Path:
    """Return the configured avro-tools jar path, or raise if not configured"""
    if not AVRO_TOOLS_JAR:
        raise ValueError("AVRO_TOOLS_JAR not found in environment variables")
    return Path(AVRO_TOOLS_JAR)

"""
IDE Schema - In-memory IDE project model

The IDE integration serializes this to its own project files. Only the
directory sets matter here; all of them are unordered and de-duplicated.
"""
from typing import Set
from pathlib import Path
from pydantic import BaseModel, Field


class IdeModule(BaseModel):
    """Source, test source and exclude roots of one IDE module"""
    name: str = Field(..., description="Module name (the project name)")
    source_dirs: Set[Path] = Field(default_factory=set)
    test_source_dirs: Set[Path] = Field(default_factory=set)
    exclude_dirs: Set[Path] = Field(default_factory=set)

    def nested_source_roots(self) -> Set[Path]:
        """Source roots that sit beneath an excluded directory (the IDE rejects these)"""
        nested = set()
        for root in self.source_dirs | self.test_source_dirs:
            for excluded in self.exclude_dirs:
                if root == excluded or excluded in root.parents:
                    nested.add(root)
        return nested


__all__ = ["IdeModule"]

"""Base types for the stage-directory storage.

A document's processing stage is encoded by the directory it sits in. Moving a
file between stage directories is the only way its stage changes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class Stage(Enum):
    """Stage directories, relative to the working directory."""
    INTAKE = "in"
    FORCE_INTAKE = "force-processing"
    CLEANED = "cleaned"
    OCR = "ocr"
    OUT = "out"

    @property
    def dirname(self) -> str:
        return self.value

    @classmethod
    def intake_for(cls, forced: bool) -> "Stage":
        """Intake directory for a processing mode."""
        return cls.FORCE_INTAKE if forced else cls.INTAKE


@dataclass
class FileInfo:
    """Information about a file in a stage directory.

    Attributes:
        stage: Stage directory the file sits in
        name: Filename only (no directory)
        size: File size in bytes (optional)
    """
    stage: Stage
    name: str
    size: Optional[int] = None

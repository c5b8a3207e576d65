"""Local filesystem driver for the stage directories."""

import os
from typing import List, Optional

from .base import Stage, StorageError, FileInfo


class LocalDriver:
    """Storage driver for the working directory.

    All stage directories live directly below root_path.
    """

    def __init__(self, root_path: str, create: bool = True) -> None:
        """Initialize the driver.

        Args:
            root_path: Path to the working directory
            create: Create missing stage directories

        Raises:
            StorageError: If root_path doesn't exist or isn't a directory
        """
        self.root_path = os.path.abspath(root_path)
        if not os.path.exists(self.root_path):
            raise StorageError(f"Directory does not exist: {self.root_path}")
        if not os.path.isdir(self.root_path):
            raise StorageError(f"Not a directory: {self.root_path}")
        if create:
            self.ensure_stages()

    @property
    def display_name(self) -> str:
        return f"{self.root_path} (local)"

    def ensure_stages(self) -> None:
        """Create every stage directory that does not exist yet."""
        for stage in Stage:
            os.makedirs(self.stage_path(stage), exist_ok=True)

    def stage_path(self, stage: Stage) -> str:
        """Absolute path of a stage directory."""
        return os.path.join(self.root_path, stage.dirname)

    def path(self, stage: Stage, name: str) -> str:
        """Absolute path of a file inside a stage directory."""
        return os.path.join(self.stage_path(stage), name)

    def list_files(self, stage: Stage, extension: Optional[str] = None) -> List[FileInfo]:
        """List files in a stage directory, sorted by name.

        Args:
            stage: Stage directory to list
            extension: Filter by file extension (e.g., ".pdf"), case-insensitive
        """
        full_path = self.stage_path(stage)

        if not os.path.isdir(full_path):
            raise StorageError(f"Stage directory does not exist: {stage.dirname}")

        extension_lower = extension.lower() if extension else None
        results = []

        for filename in sorted(os.listdir(full_path)):
            abs_path = os.path.join(full_path, filename)
            if not os.path.isfile(abs_path):
                continue
            if extension_lower and not filename.lower().endswith(extension_lower):
                continue

            try:
                size = os.path.getsize(abs_path)
            except OSError:
                size = None

            results.append(FileInfo(stage=stage, name=filename, size=size))

        return results

    def file_exists(self, stage: Stage, name: str) -> bool:
        """Check if a file exists in a stage directory."""
        return os.path.isfile(self.path(stage, name))

    def move(self, src_stage: Stage, name: str, dest_stage: Stage,
             dest_name: Optional[str] = None) -> str:
        """Atomically move a file to another stage directory.

        Uses os.replace, so source and destination must be on the same
        filesystem (they share the working directory).

        Args:
            src_stage: Stage the file currently sits in
            name: Current filename
            dest_stage: Target stage
            dest_name: New filename (defaults to name)

        Returns:
            Absolute destination path

        Raises:
            StorageError: If the source is missing or the rename fails
        """
        src = self.path(src_stage, name)
        dest = self.path(dest_stage, dest_name or name)

        if not os.path.isfile(src):
            raise StorageError(f"Source file does not exist: {src_stage.dirname}/{name}")

        try:
            os.replace(src, dest)
        except OSError as e:
            raise StorageError(f"Failed to move {src} to {dest}: {e}")
        return dest

    def delete(self, stage: Stage, name: str) -> None:
        """Delete a file from a stage directory."""
        full_path = self.path(stage, name)

        if not os.path.isfile(full_path):
            raise StorageError(f"File does not exist: {stage.dirname}/{name}")

        try:
            os.remove(full_path)
        except OSError as e:
            raise StorageError(f"Failed to delete {stage.dirname}/{name}: {e}")

"""Base class for external tool adapters.

Every adapter runs one external process with a fixed argument template and
then checks that the expected output file exists. That check is the only
success signal: the tools' exit codes are not consistent (OCRmyPDF exits
non-zero for recoverable warnings, pdftotext exits zero on some broken
inputs), so they are reported but never trusted.
"""

import os
import subprocess
from typing import Optional, Sequence

from rich.markup import escape

from ocrrename import OcrRename


class ToolFailure(Exception):
    """An external tool ran but did not produce its expected output."""

    def __init__(self, tool: str, input_path: str, detail: Optional[str] = None) -> None:
        self.tool = tool
        self.input_path = input_path
        self.detail = detail
        message = f"{tool} did not produce output for {input_path}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ExternalTool:
    """Runs an external command and verifies its output artifact."""

    name: str = "tool"

    def __init__(self, command: Sequence[str]) -> None:
        """
        Args:
            command: argv prefix, e.g. ("ocrmypdf",) or ("uvx", "ocrmypdf")
        """
        self.command = tuple(command)

    def _run(self, args: Sequence[str], input_path: str) -> subprocess.CompletedProcess:
        """Run the command with args appended and wait for it to exit.

        Raises:
            ToolFailure: If the executable cannot be started at all
        """
        argv = list(self.command) + list(args)
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors='replace',
            )
        except OSError as e:
            raise ToolFailure(self.name, input_path, f"cannot run {argv[0]}: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip().splitlines()
            last_line = stderr[-1] if stderr else ""
            OcrRename.print_right(
                f"[yellow]  {self.name} exited with {result.returncode}"
                f"{': ' + escape(last_line) if last_line else ''}[/yellow]"
            )
        return result

    def _require(self, output_path: str, input_path: str) -> str:
        """Raise ToolFailure unless output_path exists."""
        if not os.path.exists(output_path):
            raise ToolFailure(self.name, input_path)
        return output_path

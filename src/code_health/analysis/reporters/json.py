"""JSON reporter for code health results."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from loguru import logger

from ...core.exceptions import ReportError

if TYPE_CHECKING:
    from ..metrics import Report


class JsonReporter:
    """Serialize a report to indented JSON with sorted keys."""

    def dumps(self, report: Report) -> bytes:
        """Render a report to JSON bytes."""
        try:
            return orjson.dumps(
                report.to_dict(), option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS
            )
        except TypeError as e:
            raise ReportError(f"Report is not JSON serializable: {e}") from e

    def write(self, report: Report, path: Path) -> Path:
        """Write a report to disk.

        Args:
            report: Analysis report
            path: Output file (parent directories are created)

        Returns:
            The path written

        Raises:
            ReportError: If the file cannot be written
        """
        data = self.dumps(report)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise ReportError(
                f"Failed to write report to {path}: {e}", context={"path": str(path)}
            ) from e

        logger.debug(f"Wrote JSON report ({len(data)} bytes) to {path}")
        return path

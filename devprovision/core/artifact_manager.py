"""
Artifact management for storing run reports.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.report import RunReport


class ArtifactManager:
    """Writes run reports to disk. Reports are never read back to drive provisioning."""

    def __init__(self, base_path: Path, run_id: Optional[str] = None):
        """
        Initialize artifact manager.

        Args:
            base_path: Base directory for storing artifacts
            run_id: Optional run ID; defaults to a UTC timestamp
        """
        self.logger = logging.getLogger(__name__)
        self.base_path = Path(base_path)
        self.run_id = run_id or datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        self.run_base_path = self.base_path / "runs" / self.run_id

    def save_json(self, filename: str, data: Dict[str, Any],
                  subdirs: Optional[List[str]] = None) -> Path:
        """
        Save JSON data to file.

        Args:
            filename: JSON filename
            data: Data to save
            subdirs: Optional subdirectories under the run directory

        Returns:
            Path to saved file
        """
        target_dir = self.run_base_path
        for subdir in subdirs or []:
            target_dir = target_dir / subdir
        target_dir.mkdir(parents=True, exist_ok=True)

        json_path = target_dir / filename
        with open(json_path, "w") as f:
            json.dump(data, f, indent=2, default=str)

        self.logger.info(f"Saved JSON to {json_path}")
        return json_path

    def save_report(self, report: RunReport, path: Optional[Path] = None) -> Path:
        """Save a run report, to ``path`` if given, else under the run directory."""
        data = report.model_dump(mode="json")
        if path is None:
            return self.save_json(f"{report.target}.json", data)

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2, default=str)
        self.logger.info(f"Saved report to {path}")
        return path

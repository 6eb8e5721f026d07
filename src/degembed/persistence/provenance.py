"""Run provenance: what code, config and reference data produced a result."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from degembed.config.schema import DEGEmbedConfig


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ProcessingStep:
    name: str
    timestamp: str = field(default_factory=_utc_now)
    details: dict = field(default_factory=dict)


def fingerprint_reference_file(path: Path) -> dict:
    """Size and modification time of a reference file, or missing=True."""
    path = Path(path)
    if not path.exists():
        return {"file": path.name, "missing": True}
    stat = path.stat()
    return {
        "file": path.name,
        "bytes": stat.st_size,
        "modified": datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat(),
    }


class ProvenanceTracker:
    """
    Collects provenance for one analysis run and writes it next to the results.

    The sidecar records the package version, the config hash, a fingerprint
    of every reference dataset the config points at, and the ordered
    processing steps with their details.
    """

    def __init__(self, package_version: str, config: DEGEmbedConfig):
        self.package_version = package_version
        self.config_hash = config.config_hash()
        self.data_dir = Path(config.data_dir)
        self.reference_files = config.files.model_dump()
        self.started_at = _utc_now()
        self.steps: list[ProcessingStep] = []

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        self.steps.append(ProcessingStep(name=step_name, details=dict(details or {})))

    def reference_data(self) -> dict:
        """Fingerprint of each configured reference dataset, keyed by config field."""
        return {
            key: fingerprint_reference_file(self.data_dir / file_name)
            for key, file_name in self.reference_files.items()
        }

    def create_metadata(self) -> dict:
        return {
            "package_version": self.package_version,
            "config_hash": self.config_hash,
            "started_at": self.started_at,
            "data_dir": str(self.data_dir),
            "reference_data": self.reference_data(),
            "processing_steps": [asdict(step) for step in self.steps],
        }

    def save_sidecar(self, output_path: Path) -> Path:
        """
        Write the metadata to <stem>.provenance.json beside output_path.

        Args:
            output_path: Main result file, e.g. results/result_2024-11-08-153012.tsv

        Returns:
            Path of the sidecar file
        """
        output_path = Path(output_path)
        sidecar_path = output_path.parent / f"{output_path.stem}.provenance.json"
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)
        sidecar_path.write_text(
            json.dumps(self.create_metadata(), indent=2, default=str),
            encoding="utf-8",
        )
        return sidecar_path

    @staticmethod
    def load_sidecar(sidecar_path: Path) -> dict:
        return json.loads(Path(sidecar_path).read_text(encoding="utf-8"))

    @classmethod
    def from_config(
        cls,
        config: DEGEmbedConfig,
        version: Optional[str] = None,
    ) -> "ProvenanceTracker":
        """Create a tracker, defaulting version to degembed.__version__."""
        if version is None:
            from degembed import __version__
            version = __version__
        return cls(version, config)

"""Persist a ranked analysis result as TSV, Parquet and a YAML summary."""

from datetime import datetime, timezone
from pathlib import Path

import polars as pl
import yaml

from degembed.analysis.aggregate import P_VALUE_COLUMN
from degembed.analysis.pipeline import AnalysisResult

# Functions listed by name in the YAML summary
SUMMARY_TOP_FUNCTIONS = 5


def timestamped_name(prefix: str = "result", now: datetime | None = None) -> str:
    """Return e.g. "result_2024-11-08-153012"."""
    now = now or datetime.now()
    return f"{prefix}_{now.strftime('%Y-%m-%d-%H%M%S')}"


def summarize_result(result: AnalysisResult, significance_level: float = 0.05) -> dict:
    """Group sizes, test counts and the best-ranked functions of a run."""
    table = result.table
    top = table.head(SUMMARY_TOP_FUNCTIONS).select("name", P_VALUE_COLUMN)
    return {
        "category": result.category.value,
        "statistics": {
            "functions_tested": result.n_functions,
            "deg_count": len(result.groups.degs),
            "background_count": len(result.groups.background),
            "background_is_default": result.groups.background_is_default,
            "significance_level": significance_level,
            "significant_count": table.filter(
                pl.col(P_VALUE_COLUMN) < significance_level
            ).height,
        },
        "top_functions": [
            {"name": name, "p_value": float(p)} for name, p in top.iter_rows()
        ],
    }


def write_result_table(
    result: AnalysisResult,
    output_dir: Path,
    filename_base: str | None = None,
    significance_level: float = 0.05,
) -> dict[str, Path]:
    """
    Write the ranked table and its summary sidecar.

    Files are <base>.tsv (tab separated, header row), <base>.parquet
    (snappy) and <base>.provenance.yaml. Rows keep their ranked order.

    Args:
        result: AnalysisResult from run_deg_embed
        output_dir: Target directory, created if needed
        filename_base: Name without extension (default: result_<timestamp>)
        significance_level: Raw p-value threshold for significant_count

    Returns:
        Paths keyed "tsv", "parquet" and "provenance"
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    base = filename_base or timestamped_name()
    paths = {
        "tsv": output_dir / f"{base}.tsv",
        "parquet": output_dir / f"{base}.parquet",
        "provenance": output_dir / f"{base}.provenance.yaml",
    }

    table = result.table
    table.write_csv(paths["tsv"], separator="\t", include_header=True)
    table.write_parquet(paths["parquet"], compression="snappy", use_pyarrow=True)

    sidecar = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": [paths["tsv"].name, paths["parquet"].name],
        **summarize_result(result, significance_level),
        "column_names": table.columns,
    }
    paths["provenance"].write_text(
        yaml.safe_dump(sidecar, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return paths

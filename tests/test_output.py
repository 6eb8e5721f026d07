"""Tests for result writers and provenance tracking."""

import json
import re
from datetime import datetime

import polars as pl
import pytest
import yaml

from degembed.analysis import run_deg_embed
from degembed.config import load_config
from degembed.output import timestamped_name, write_result_table
from degembed.persistence import ProvenanceTracker


@pytest.fixture
def analysis_result(reference_data, degs):
    """Ranked GOBP result on the synthetic reference data."""
    return run_deg_embed(degs, reference_data, "GOBP")


def test_timestamped_name_format():
    name = timestamped_name(now=datetime(2024, 11, 8, 15, 30, 12))

    assert name == "result_2024-11-08-153012"
    assert re.fullmatch(r"result_\d{4}-\d{2}-\d{2}-\d{6}", timestamped_name())


def test_write_creates_files(tmp_path, analysis_result):
    """Test that TSV, Parquet and YAML sidecar are written."""
    paths = write_result_table(analysis_result, tmp_path / "out", filename_base="run")

    assert paths["tsv"] == tmp_path / "out" / "run.tsv"
    assert paths["tsv"].exists()
    assert paths["parquet"].exists()
    assert paths["provenance"].name == "run.provenance.yaml"


def test_write_default_name(tmp_path, analysis_result):
    paths = write_result_table(analysis_result, tmp_path)

    assert re.fullmatch(r"result_\d{4}-\d{2}-\d{2}-\d{6}\.tsv", paths["tsv"].name)


def test_tsv_and_parquet_match_ranked_table(tmp_path, analysis_result):
    paths = write_result_table(analysis_result, tmp_path, filename_base="run")

    tsv = pl.read_csv(paths["tsv"], separator="\t")
    parquet = pl.read_parquet(paths["parquet"])

    assert tsv.columns == analysis_result.table.columns
    assert tsv["name"].to_list() == analysis_result.table["name"].to_list()
    assert parquet["name"].to_list() == analysis_result.table["name"].to_list()
    assert parquet["cliffs_delta_ci_95"].to_list() == (
        analysis_result.table["cliffs_delta_ci_95"].to_list()
    )


def test_provenance_yaml_content(tmp_path, analysis_result):
    paths = write_result_table(
        analysis_result, tmp_path, filename_base="run", significance_level=0.01
    )

    with open(paths["provenance"]) as f:
        provenance = yaml.safe_load(f)

    assert provenance["category"] == "GOBP"
    assert provenance["output_files"] == ["run.tsv", "run.parquet"]
    stats = provenance["statistics"]
    assert stats["functions_tested"] == 4
    assert stats["deg_count"] == 20
    assert stats["background_count"] == 200
    assert stats["background_is_default"] is True
    assert stats["significance_level"] == 0.01
    assert stats["significant_count"] >= 1
    assert provenance["column_names"] == analysis_result.table.columns
    assert provenance["top_functions"][0]["name"] == "GOBP_SIGNAL"
    assert len(provenance["top_functions"]) == 4


def test_provenance_tracker_sidecar(tmp_path, config_file):
    config = load_config(config_file)
    tracker = ProvenanceTracker.from_config(config, version="9.9.9")
    tracker.record_step("run_deg_embed", {"category": "GOBP", "functions_tested": 4})
    tracker.record_step("write_results")

    sidecar = tracker.save_sidecar(tmp_path / "result_x.tsv")
    loaded = ProvenanceTracker.load_sidecar(sidecar)

    assert sidecar == tmp_path / "result_x.provenance.json"
    assert loaded["package_version"] == "9.9.9"
    assert loaded["config_hash"] == config.config_hash()
    assert [s["name"] for s in loaded["processing_steps"]] == [
        "run_deg_embed",
        "write_results",
    ]
    assert loaded["processing_steps"][0]["details"]["category"] == "GOBP"
    assert loaded["processing_steps"][1]["details"] == {}
    assert json.loads(sidecar.read_text()) == loaded


def test_provenance_fingerprints_reference_data(tmp_path, config_file):
    config = load_config(config_file)
    config.files.moa_similarity = "not_shipped.parquet"
    tracker = ProvenanceTracker.from_config(config)

    reference = tracker.create_metadata()["reference_data"]

    assert reference["gene_list"]["file"] == "gene_list.txt"
    assert reference["gene_list"]["bytes"] > 0
    assert "modified" in reference["gobp_similarity"]
    assert reference["moa_similarity"] == {"file": "not_shipped.parquet", "missing": True}

"""Integration tests for the degembed CLI using CliRunner."""

import json
from unittest.mock import patch

import httpx
import numpy as np
import polars as pl
import pytest
from click.testing import CliRunner

from degembed.api_clients import OpenAIClient
from degembed.cli.main import cli


@pytest.fixture
def degs_file(tmp_path):
    path = tmp_path / "degs.txt"
    path.write_text("\n".join(f"GENE{i:03d}" for i in range(20)) + "\n")
    return path


def fake_openai(request):
    """Mock transport answering chat and embedding requests."""
    path = request.url.path
    if path.endswith("/chat/completions"):
        return httpx.Response(200, json={
            "choices": [{"message": {"content": "A described function."}}],
        })
    n_inputs = len(json.loads(request.content)["input"])
    return httpx.Response(200, json={
        "data": [
            {"index": i, "embedding": [float(i + 1)] + [0.5] * 15}
            for i in range(n_inputs)
        ],
    })


def mock_client_factory(config, api_key, transport=None):
    return OpenAIClient(
        api_key=api_key,
        base_url=config.openai.base_url,
        max_retries=1,
        transport=httpx.MockTransport(fake_openai),
    )


def test_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])

    assert result.exit_code == 0
    assert 'analyze' in result.output
    assert 'describe' in result.output
    assert 'embed' in result.output


def test_info(config_file):
    runner = CliRunner()
    result = runner.invoke(cli, ['--config', str(config_file), 'info'])

    assert result.exit_code == 0
    assert '(hash ' in result.output
    assert 'DEG Range: 15-500' in result.output
    assert 'gene_list.txt' in result.output
    assert 'missing' not in result.output


def test_analyze_writes_results(config_file, degs_file, tmp_path):
    output_dir = tmp_path / "analysis_out"
    runner = CliRunner()
    result = runner.invoke(cli, [
        '--config', str(config_file),
        'analyze',
        '--degs', str(degs_file),
        '--category', 'gobp',
        '--output-dir', str(output_dir),
        '--top', '2',
    ])

    assert result.exit_code == 0, result.output
    assert 'GOBP_SIGNAL' in result.output
    assert 'Analysis complete!' in result.output

    tsv_files = list(output_dir.glob("result_*.tsv"))
    assert len(tsv_files) == 1
    table = pl.read_csv(tsv_files[0], separator="\t")
    assert table["name"][0] == "GOBP_SIGNAL"
    assert len(list(output_dir.glob("result_*.provenance.json"))) == 1
    assert len(list(output_dir.glob("result_*.provenance.yaml"))) == 1


def test_analyze_no_output(config_file, degs_file, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, [
        '--config', str(config_file),
        'analyze',
        '--degs', str(degs_file),
        '--category', 'KEGG',
        '--no-output',
        '--workers', '1',
    ])

    assert result.exit_code == 0, result.output
    assert 'KEGG_SIGNAL' in result.output
    assert not list((tmp_path / "results").glob("result_*"))


def test_analyze_unknown_category(config_file, degs_file):
    runner = CliRunner()
    result = runner.invoke(cli, [
        '--config', str(config_file),
        'analyze',
        '--degs', str(degs_file),
        '--category', 'FOOBAR',
    ])

    assert result.exit_code == 1
    assert "Unknown category 'FOOBAR'" in result.output


def test_analyze_too_few_degs(config_file, tmp_path):
    degs = tmp_path / "few.txt"
    degs.write_text("GENE000\nGENE001\nGENE002\n")
    runner = CliRunner()
    result = runner.invoke(cli, [
        '--config', str(config_file),
        'analyze',
        '--degs', str(degs),
        '--category', 'GOBP',
    ])

    assert result.exit_code == 1
    assert 'Insufficient or excessive DEGs' in result.output


def test_analyze_customized_requires_embeddings(config_file, degs_file):
    runner = CliRunner()
    result = runner.invoke(cli, [
        '--config', str(config_file),
        'analyze',
        '--degs', str(degs_file),
        '--category', 'Customized',
    ])

    assert result.exit_code == 1
    assert 'Missing embedding input' in result.output


def test_describe_without_api_key(config_file, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    runner = CliRunner()
    result = runner.invoke(cli, ['--config', str(config_file), 'describe', 'Apoptosis'])

    assert result.exit_code == 1
    assert 'Missing API key' in result.output


def test_describe_prints_description(config_file):
    runner = CliRunner()
    with patch.object(OpenAIClient, "from_config", side_effect=mock_client_factory):
        result = runner.invoke(cli, [
            '--config', str(config_file),
            'describe', 'Apoptosis',
            '--api-key', 'sk-test',
        ])

    assert result.exit_code == 0, result.output
    assert 'Apoptosis' in result.output
    assert 'A described function.' in result.output


def test_embed_then_analyze_customized(config_file, degs_file, tmp_path):
    """Test the custom embedding table feeds the Customized analysis."""
    out_path = tmp_path / "functions.parquet"
    runner = CliRunner()
    with patch.object(OpenAIClient, "from_config", side_effect=mock_client_factory):
        embed_result = runner.invoke(cli, [
            '--config', str(config_file),
            'embed', 'STING Pathway', 'Apoptosis',
            '--api-key', 'sk-test',
            '--out', str(out_path),
        ])

    assert embed_result.exit_code == 0, embed_result.output
    table = pl.read_parquet(out_path)
    assert table["name"].to_list() == ["STING Pathway", "Apoptosis"]
    assert table.width == 17
    assert np.isfinite(table.drop("name").to_numpy()).all()

    analyze_result = runner.invoke(cli, [
        '--config', str(config_file),
        'analyze',
        '--degs', str(degs_file),
        '--category', 'Customized',
        '--embeddings', str(out_path),
        '--no-output',
    ])

    assert analyze_result.exit_code == 0, analyze_result.output
    assert 'Tested 2 functions' in analyze_result.output

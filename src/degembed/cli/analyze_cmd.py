"""Analyze command: rank functions by DEG vs. background similarity."""

import logging
import sys
from pathlib import Path

import click

from degembed.analysis import run_deg_embed
from degembed.config.loader import load_config_with_overrides
from degembed.errors import DEGEmbedError
from degembed.output import timestamped_name, write_result_table
from degembed.persistence import ProvenanceTracker
from degembed.similarity import (
    Category,
    FileReferenceData,
    load_embedding_table,
    read_gene_list,
)

logger = logging.getLogger(__name__)


@click.command('analyze')
@click.option(
    '--degs',
    'degs_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help='File with one DEG symbol per line'
)
@click.option(
    '--bkgs',
    'bkgs_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='File with background gene symbols (default: whole gene universe)'
)
@click.option(
    '--category',
    required=True,
    help='GOBP, C2CP_all, BIOCARTA, KEGG, PID, REACTOME, WP, MOA or Customized'
)
@click.option(
    '--embeddings',
    'embeddings_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help='Function embedding table (required for Customized)'
)
@click.option(
    '--output-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Directory for result files (default: output_dir from config)'
)
@click.option(
    '--no-output',
    is_flag=True,
    help='Do not write result files'
)
@click.option(
    '--workers',
    type=click.IntRange(min=1),
    default=None,
    help='Thread pool size for per-function comparisons'
)
@click.option(
    '--top',
    type=click.IntRange(min=0),
    default=10,
    show_default=True,
    help='Number of ranked functions to display'
)
@click.pass_context
def analyze(ctx, degs_path, bkgs_path, category, embeddings_path, output_dir,
            no_output, workers, top):
    """Compare DEG and background cosine similarities for every function.

    For each function in the category, runs a one-tailed Wilcoxon rank-sum
    test (DEGs > background), reports median similarities, Cliff's delta
    with a 95% confidence interval, and the 10 most similar DEGs. Functions
    are ranked by raw p-value; no multiple-testing correction is applied.

    Examples:

        # GO biological processes against the whole gene universe
        degembed analyze --degs degs.txt --category GOBP

        # Custom pathways against an explicit background
        degembed analyze --degs degs.txt --bkgs panel.txt \\
            --category Customized --embeddings sting.parquet
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== DEG-Embed Analysis ===", bold=True))
    click.echo()

    try:
        overrides = {}
        if workers is not None:
            overrides['analysis.workers'] = workers
        config = load_config_with_overrides(config_path, overrides)
        click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))

        parsed_category = Category.parse(category)
        provenance = ProvenanceTracker.from_config(config)

        degs = read_gene_list(degs_path)
        bkgs = read_gene_list(bkgs_path) if bkgs_path is not None else None
        function_embeddings = (
            load_embedding_table(embeddings_path) if embeddings_path is not None else None
        )
        click.echo(f"  DEGs read: {len(degs)}")
        click.echo(
            f"  Background read: {len(bkgs)}" if bkgs is not None
            else "  Background: built-in gene universe"
        )
        click.echo()

        provider = FileReferenceData.from_config(config)

        click.echo(click.style(f"Comparing similarities ({parsed_category.value})...", bold=True))
        result = run_deg_embed(
            degs,
            provider,
            parsed_category,
            bkgs=bkgs,
            function_embeddings=function_embeddings,
            settings=config.analysis,
        )
        provenance.record_step('run_deg_embed', {
            'category': parsed_category.value,
            'deg_count': len(result.groups.degs),
            'background_count': len(result.groups.background),
            'functions_tested': result.n_functions,
        })

        significant = result.significant(config.analysis.significance_level).height
        click.echo(click.style(
            f"  Tested {result.n_functions} functions with {len(result.groups.degs)} matched DEGs "
            f"({significant} with p < {config.analysis.significance_level})",
            fg='green'
        ))
        click.echo()

        if top > 0 and result.n_functions > 0:
            click.echo(click.style(f"Top {min(top, result.n_functions)} functions:", bold=True))
            for row in result.table.head(top).iter_rows(named=True):
                click.echo(
                    f"  {row['name']}: p={row['p_value_MWN_one_tailed']:.3g}, "
                    f"delta={row['cliffs_delta']:.3f} {row['cliffs_delta_ci_95']} "
                    f"({row['cliffs_delta_magnitude']})"
                )
            click.echo()

        if not no_output:
            target_dir = output_dir or config.output_dir
            filename_base = timestamped_name()
            paths = write_result_table(
                result,
                target_dir,
                filename_base=filename_base,
                significance_level=config.analysis.significance_level,
            )
            sidecar = provenance.save_sidecar(paths['tsv'])
            click.echo(click.style(f"  Results saved: {paths['tsv']}", fg='green'))
            click.echo(f"  Parquet: {paths['parquet']}")
            click.echo(f"  Provenance: {sidecar}")
            click.echo()

        click.echo(click.style("Analysis complete!", fg='green', bold=True))

    except DEGEmbedError as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(click.style(f"Analyze command failed: {e}", fg='red'), err=True)
        logger.exception("Analyze command failed")
        sys.exit(1)

"""degembed command line entry point.

Global options select the config file and log level; subcommands live in
analyze_cmd and describe_cmd.
"""

import logging
from pathlib import Path

import click

from degembed import __version__
from degembed.cli.analyze_cmd import analyze
from degembed.cli.describe_cmd import describe, embed
from degembed.config.loader import load_config
from degembed.persistence.provenance import fingerprint_reference_file

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@click.group()
@click.version_option(__version__, prog_name='degembed')
@click.option(
    '--config',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default='config/default.yaml',
    show_default=True,
    help='degembed configuration YAML'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Log at DEBUG level'
)
@click.pass_context
def cli(ctx, config, verbose):
    """DEG-Embed: compare DEGs to biological functions in embedding space.

    Tests whether differentially expressed genes are semantically closer
    to a function, pathway or mechanism of action than background genes,
    using cosine similarities between text embeddings.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.update(config_path=config, verbose=verbose)


@cli.command()
@click.pass_context
def info(ctx):
    """Show version, settings and reference data status."""
    config_path = ctx.obj['config_path']

    try:
        config = load_config(config_path)
    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)

    click.echo(f"DEG-Embed v{__version__}")
    click.echo(f"Config: {config_path} (hash {config.config_hash()[:16]}...)")
    click.echo()

    click.echo(click.style(f"Reference Data ({config.data_dir}):", bold=True))
    for key, file_name in config.files.model_dump().items():
        status = fingerprint_reference_file(config.data_dir / file_name)
        if status.get("missing"):
            state = click.style("missing", fg='red')
        else:
            state = click.style(f"{status['bytes']:,} bytes", fg='green')
        click.echo(f"  {key:<16} {file_name} [{state}]")
    click.echo()

    analysis = config.analysis
    click.echo(click.style("Analysis Settings:", bold=True))
    click.echo(f"  DEG Range: {analysis.min_degs}-{analysis.max_degs}")
    click.echo(f"  Top DEGs Reported: {analysis.top_n}")
    click.echo(f"  Cliff's Delta CI: {analysis.conf_level:.0%} ({analysis.ci_method})")
    click.echo(f"  Workers: {analysis.workers or 'auto'}")
    click.echo()

    click.echo(click.style("OpenAI:", bold=True))
    click.echo(f"  Chat Model: {config.openai.chat_model}")
    click.echo(f"  Embedding Model: {config.openai.embedding_model}")
    click.echo(f"  Retries/Timeout: {config.openai.max_retries} / {config.openai.timeout_seconds}s")


cli.add_command(analyze)
cli.add_command(describe)
cli.add_command(embed)


if __name__ == '__main__':
    cli()

"""Describe and embed commands: build custom function embeddings.

Both commands call the remote OpenAI endpoints; the analysis itself
never does.
"""

import logging
import sys
from pathlib import Path

import click

from degembed.api_clients import (
    OpenAIClient,
    generate_function_description,
    generate_function_descriptions,
    generate_text_embeddings,
)
from degembed.config.loader import load_config
from degembed.errors import DEGEmbedError

logger = logging.getLogger(__name__)

api_key_option = click.option(
    '--api-key',
    envvar='OPENAI_API_KEY',
    default=None,
    help='OpenAI API key (default: OPENAI_API_KEY environment variable)'
)


@click.command('describe')
@click.argument('names', nargs=-1, required=True)
@api_key_option
@click.option(
    '--save',
    is_flag=True,
    help='Also save each description as description_<timestamp>.txt in output_dir'
)
@click.pass_context
def describe(ctx, names, api_key, save):
    """Generate a description paragraph for each function NAME."""
    config_path = ctx.obj['config_path']

    try:
        config = load_config(config_path)
        with OpenAIClient.from_config(config, api_key=api_key) as client:
            for name in names:
                description = generate_function_description(
                    client,
                    name,
                    model=config.openai.chat_model,
                    temperature=config.openai.temperature,
                    output_dir=config.output_dir if save else None,
                )
                click.echo(click.style(name, bold=True))
                click.echo(description)
                click.echo()

    except DEGEmbedError as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(click.style(f"Describe command failed: {e}", fg='red'), err=True)
        logger.exception("Describe command failed")
        sys.exit(1)


@click.command('embed')
@click.argument('names', nargs=-1, required=True)
@api_key_option
@click.option(
    '--out',
    'out_path',
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help='Parquet file for the function embedding table'
)
@click.option(
    '--no-describe',
    is_flag=True,
    help='Embed the names themselves instead of generated descriptions'
)
@click.pass_context
def embed(ctx, names, api_key, out_path, no_describe):
    """Build a function embedding table for NAMES.

    By default each name is first expanded into a description paragraph,
    which is then embedded. Use the output with
    `degembed analyze --category Customized --embeddings FILE`.
    """
    config_path = ctx.obj['config_path']

    try:
        config = load_config(config_path)
        with OpenAIClient.from_config(config, api_key=api_key) as client:
            if no_describe:
                texts = {name: name for name in names}
            else:
                click.echo(f"Generating {len(names)} descriptions...")
                texts = generate_function_descriptions(
                    client,
                    names,
                    model=config.openai.chat_model,
                    temperature=config.openai.temperature,
                )

            click.echo("Embedding texts...")
            table = generate_text_embeddings(
                client, texts, model=config.openai.embedding_model
            )

        path = table.write_parquet(out_path)
        click.echo(click.style(
            f"Saved {table.shape[0]} x {table.dimensions} embedding table: {path}",
            fg='green'
        ))

    except DEGEmbedError as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(click.style(f"Embed command failed: {e}", fg='red'), err=True)
        logger.exception("Embed command failed")
        sys.exit(1)

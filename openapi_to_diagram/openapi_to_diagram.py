import json

import click

from .config import RenderFormat, VisualizationConfig
from .document import DocumentLoadError, load_document
from .generator import DiagramGenerator
from .log import setup_logging
from .renderers import UnsupportedFormatError


@click.command()
@click.option(
    "--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True), help="JSON configuration file"
)
@click.option(
    "--format",
    "-f",
    "output_format",
    default=None,
    type=click.Choice([f.value for f in RenderFormat]),
    help="Output format (overrides output.format)",
)
@click.option("--schema", "-s", default=None, type=str, help="Draw only this component schema and what it uses")
@click.option("--max-properties", default=None, type=int, help="Maximum properties shown per class (0 = no limit)")
@click.option("--annotate-usage", is_flag=True, default=False, help="Annotate heavily reused components")
@click.option(
    "--merge-duplicate-refs",
    is_flag=True,
    default=False,
    help="Merge associations between the same two classes into one labelled edge",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
)
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", required=False, default=None, type=click.Path(resolve_path=True))
def openapi_to_diagram(
    config, output_format, schema, max_properties, annotate_usage, merge_duplicate_refs, log_level, path, output
):
    setup_logging(log_level)

    try:
        document = load_document(path)
    except DocumentLoadError as e:
        raise click.ClickException(str(e)) from e

    if config is not None:
        try:
            config = VisualizationConfig.load(config)
        except (OSError, json.JSONDecodeError, ValueError) as e:
            raise click.ClickException(f"Cannot load configuration {config}: {e}") from e
    else:
        config = VisualizationConfig()
    config.apply_defaults()

    # Command line flags override the configuration file
    if output_format is not None:
        config.output.format = RenderFormat(output_format)
    if max_properties is not None:
        config.schema.max_properties = max_properties
    if merge_duplicate_refs:
        config.relation.merge_duplicate_refs = True

    generator = DiagramGenerator(document, config, annotate_usage=annotate_usage)

    entry = None
    if schema is not None:
        entry = generator.component_schema(schema)
        if entry is None:
            raise click.ClickException(f"Component schema not found: {schema}")

    try:
        out = generator.generate(entry)
    except UnsupportedFormatError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(out, nl=False)
    else:
        with open(output, "w") as f:
            f.write(out)

"""CLI entry point for openapi-synth."""

from pathlib import Path

import click

from openapi_synth.config import SwaggerConfig, load_config
from openapi_synth.errors import SwaggerError
from openapi_synth.formatter import OutputFormat, detect_format, format_document
from openapi_synth.generator.document import Generator
from openapi_synth.logging_config import setup_logging
from openapi_synth.parser.manifest import RouteManifest, load_manifest
from openapi_synth.resolver import ImportResolver


def _build_generator(
    manifest: RouteManifest,
    config: SwaggerConfig,
    route_filter: str | None,
    resolver_name: str = "manifest",
) -> Generator:
    resolver = ImportResolver() if resolver_name == "import" else manifest
    return Generator(
        config,
        manifest.list_routes(),
        resolver,
        route_filter=route_filter,
        scope_provider=manifest,
        middleware_resolver=manifest,
    )


def _output_format(fmt: str, output: Path | None) -> OutputFormat:
    if fmt != "auto":
        return OutputFormat.parse(fmt)
    if output is not None:
        return detect_format(output)
    return OutputFormat.JSON


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """openapi-synth: generate OpenAPI documents from application routes."""
    setup_logging(verbose)


@main.command()
@click.argument("manifest_path", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file path. Prints to stdout when omitted.")
@click.option("--format", "fmt", default="auto", type=click.Choice(["auto", "json", "yaml"]), help="Output format.")
@click.option("--filter", "route_filter", default=None, help="Only document routes starting with this prefix.")
@click.option("--resolver", "resolver_name", default="manifest", type=click.Choice(["manifest", "import"]), help="Where handler docs and rules come from.")
def generate(
    manifest_path: Path,
    config_path: Path | None,
    output: Path | None,
    fmt: str,
    route_filter: str | None,
    resolver_name: str,
):
    """Generate an OpenAPI document from a route manifest."""
    try:
        config = load_config(config_path)
        manifest = load_manifest(manifest_path)
        generator = _build_generator(manifest, config, route_filter, resolver_name)
        document = generator.generate()
        content = format_document(document, _output_format(fmt, output))
    except SwaggerError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(content)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    click.echo(f"Documentation saved to {output}", err=True)


@main.command()
@click.argument("manifest_path", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML configuration file.")
@click.option("--filter", "route_filter", default=None, help="Only list routes starting with this prefix.")
def routes(manifest_path: Path, config_path: Path | None, route_filter: str | None):
    """List the routes and methods that would be documented."""
    try:
        config = load_config(config_path)
        manifest = load_manifest(manifest_path)
    except SwaggerError as e:
        raise click.ClickException(str(e)) from e

    generator = _build_generator(manifest, config, route_filter)
    ignored_methods = {method.lower() for method in config.ignored.methods}
    count = 0
    for route in manifest.list_routes():
        if generator.is_filtered_route(route):
            continue
        methods = [m.upper() for m in route.methods if m not in ignored_methods]
        if not methods:
            continue
        click.echo(f"{'|'.join(methods):<12} {route.uri}  {route.name or ''}".rstrip())
        count += 1
    click.echo(f"Found {count} routes.")

"""CLI entry point for imagekit-web."""

import logging
from pathlib import Path

import click
import yaml

from imagekit_web.config import load_settings
from imagekit_web.errors import ConfigurationError, InvalidInputError
from imagekit_web.log import setup_logging
from imagekit_web.responsive.generator import ResponsiveImageGenerator
from imagekit_web.responsive.models import ResponsiveRequest
from imagekit_web.url.builder import UrlBuilder
from imagekit_web.url.models import SrcOptions


def _parse_transformations(values: tuple[str, ...]) -> list[dict]:
    """Parse each -t option as a YAML flow mapping, e.g. '{width: 400, height: 300}'."""
    steps = []
    for value in values:
        try:
            step = yaml.safe_load(value)
        except yaml.YAMLError as e:
            raise click.BadParameter(f"not valid YAML: {value}", param_hint="--transformation") from e
        if not isinstance(step, dict):
            raise click.BadParameter(f"expected a mapping, got: {value}", param_hint="--transformation")
        steps.append(step)
    return steps


def _parse_query(values: tuple[str, ...]) -> dict[str, str]:
    params = {}
    for value in values:
        key, sep, val = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got: {value}", param_hint="--query")
        params[key] = val
    return params


def _load(config_path: Path | None):
    try:
        return load_settings(config_path)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


def _src_fields(settings, endpoint, transformation, position, query, signed, expires_in) -> dict:
    return dict(
        url_endpoint=endpoint or settings.url_endpoint,
        transformation=_parse_transformations(transformation),
        position=position or settings.transformation_position,
        query_parameters=_parse_query(query),
        signed=signed,
        expires_in=expires_in,
    )


def src_options(func):
    """Shared URL options for the url and srcset commands."""
    options = [
        click.argument("path"),
        click.option("-e", "--endpoint", default=None, help="URL endpoint (overrides config)."),
        click.option("-t", "--transformation", multiple=True, help="Transformation step as a YAML mapping; repeat to chain."),
        click.option("--position", default=None, type=click.Choice(["query", "path"]), help="Where transformations go in the URL."),
        click.option("-q", "--query", multiple=True, help="Extra query parameter KEY=VALUE."),
        click.option("--signed", is_flag=True, help="Sign the URL with the private key."),
        click.option("--expires-in", type=click.IntRange(min=1), default=None, help="Signed URL lifetime in seconds."),
        click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """imagekit-web: build ImageKit URLs and responsive image attributes."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@main.command()
@src_options
def url(path, endpoint, transformation, position, query, signed, expires_in, config_path):
    """Print the URL for PATH."""
    settings = _load(config_path)
    fields = _src_fields(settings, endpoint, transformation, position, query, signed, expires_in)
    try:
        result = UrlBuilder(settings=settings).build(SrcOptions.create(path=path, **fields))
    except InvalidInputError as e:
        raise click.UsageError(str(e)) from e
    click.echo(result)


@main.command()
@src_options
@click.option("--width", type=click.IntRange(min=1), default=None, help="Display width in pixels.")
@click.option("--sizes", default=None, help="Value of the sizes attribute.")
@click.option("--device-breakpoints", default=None, help="Comma-separated device breakpoints.")
@click.option("--image-breakpoints", default=None, help="Comma-separated image breakpoints.")
def srcset(path, endpoint, transformation, position, query, signed, expires_in, config_path,
           width, sizes, device_breakpoints, image_breakpoints):
    """Print src, srcset and sizes for PATH as YAML."""
    settings = _load(config_path)
    fields = _src_fields(settings, endpoint, transformation, position, query, signed, expires_in)
    try:
        request = ResponsiveRequest.create(
            path=path,
            width=width,
            sizes=sizes,
            device_breakpoints=device_breakpoints or settings.device_breakpoints,
            image_breakpoints=image_breakpoints or settings.image_breakpoints,
            **fields,
        )
        result = ResponsiveImageGenerator(UrlBuilder(settings=settings)).generate(request)
    except InvalidInputError as e:
        raise click.UsageError(str(e)) from e

    output = {"src": result.src}
    if result.src_set:
        output["srcset"] = result.src_set
    if result.sizes:
        output["sizes"] = result.sizes
    click.echo(yaml.safe_dump(output, sort_keys=False, width=1_000_000), nl=False)


@main.command()
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML settings file.")
def config(config_path: Path | None):
    """Show the effective settings (keys masked)."""
    settings = _load(config_path)
    click.echo(yaml.safe_dump(settings.masked(), sort_keys=False), nl=False)

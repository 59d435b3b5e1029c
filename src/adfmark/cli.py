"""CLI entry point for adfmark: ADF JSON <-> markdown conversion."""

from __future__ import annotations

import json
import logging
import sys
from typing import IO, Any

import click

from adfmark.config import Settings, find_config, load_settings
from adfmark.errors import AdfmarkError, output_error
from adfmark.markup import adf_to_markdown, decode_document, encode_document, markdown_to_document
from adfmark.serializer import render_document


def _settings() -> Settings:
    ctx = click.get_current_context()
    settings: Settings = ctx.obj["settings"]
    return settings


def _dump(data: Any, indent: int) -> str:
    return json.dumps(data, ensure_ascii=False, indent=indent or None)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log degraded conversions to stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """adfmark: convert between Atlassian Document Format and markdown."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings()
    except AdfmarkError as e:
        output_error(e)


# ---------------------------------------------------------------------------
# to-markdown
# ---------------------------------------------------------------------------


@cli.command("to-markdown")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--render", "render_flag", is_flag=True, help="Pretty-print the markdown in the terminal.")
def to_markdown(source: IO[str], render_flag: bool) -> None:
    """Convert ADF JSON (file or stdin) to markdown."""
    try:
        md = adf_to_markdown(source.read())
    except AdfmarkError as e:
        output_error(e)
        return

    if render_flag:
        from rich.console import Console
        from rich.markdown import Markdown

        Console().print(Markdown(md))
    else:
        click.echo(md)


# ---------------------------------------------------------------------------
# to-adf
# ---------------------------------------------------------------------------


@cli.command("to-adf")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--compact", is_flag=True, help="Emit single-line JSON.")
def to_adf(source: IO[str], compact: bool) -> None:
    """Convert markdown (file or stdin) to ADF JSON."""
    settings = _settings()
    doc = markdown_to_document(source.read(), max_depth=settings.max_depth)
    indent = None if compact or not settings.json_indent else settings.json_indent
    click.echo(encode_document(doc, indent=indent))


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option(
    "--from", "source_format", type=click.Choice(["markdown", "adf"]), default="markdown", help="Input format."
)
def check(source: IO[str], source_format: str) -> None:
    """Report whether the input survives a conversion round trip unchanged.

    Exits 1 when the round trip is not stable.
    """
    settings = _settings()
    text = source.read()
    report: dict[str, Any]
    try:
        if source_format == "adf":
            original = decode_document(text)
            md = render_document(original)
            result = markdown_to_document(md, max_depth=settings.max_depth)
            report = {
                "stable": original.to_wire() == result.to_wire(),
                "original": original.to_wire(),
                "result": result.to_wire(),
                "markdown": md,
            }
        else:
            md = text.strip()
            result_md = render_document(markdown_to_document(md, max_depth=settings.max_depth))
            report = {"stable": md == result_md, "original": md, "result": result_md}
    except AdfmarkError as e:
        output_error(e)
        return

    click.echo(_dump(report, settings.json_indent))
    if not report["stable"]:
        sys.exit(1)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.command("config")
def show_config() -> None:
    """Show effective settings and the config file in use."""
    settings = _settings()
    try:
        path = find_config()
    except AdfmarkError as e:
        output_error(e)
        return
    data = {
        "config_file": str(path) if path else None,
        "max_depth": settings.max_depth,
        "json_indent": settings.json_indent,
    }
    click.echo(_dump(data, settings.json_indent))

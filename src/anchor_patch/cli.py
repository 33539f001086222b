"""Command-line interface for anchor-patch.

Provides commands for locating excerpts and reviewing proposed patches from
the terminal.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .config import LocatorConfig, load_config
from .constants import DEFAULT_ANNOTATIONS_FILE
from .errors import AnchorPatchError
from .locator import SpanLocator
from .models.annotation import Annotation
from .review import ReviewSession
from .stores import FileDocumentStore, JsonAnnotationStore

app = typer.Typer(
    name="anchor-patch",
    help="Locate review excerpts in documents and apply proposed patches.",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="YAML/JSON locator settings")
]
StoreOption = Annotated[
    Path | None,
    typer.Option("--store", help=f"Annotation file (default: ROOT/{DEFAULT_ANNOTATIONS_FILE})"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"anchor-patch version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging.")] = False,
) -> None:
    """Locate review excerpts in documents and apply proposed patches."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _locator(config: Path | None) -> SpanLocator:
    return SpanLocator(load_config(config) if config else LocatorConfig())


def _session(root: Path, store: Path | None, config: Path | None) -> ReviewSession:
    return ReviewSession(
        FileDocumentStore(root),
        JsonAnnotationStore(store or root / DEFAULT_ANNOTATIONS_FILE),
        _locator(config),
    )


def _read(file: Path) -> str:
    with open(file, encoding="utf-8", newline="") as f:
        return f.read()


@app.command()
def locate(
    file: Annotated[Path, typer.Argument(help="Path to the document")],
    excerpt: Annotated[str, typer.Option("--excerpt", "-e", help="Text to locate")],
    config: ConfigOption = None,
) -> None:
    """Show where an excerpt is in a document and which strategy found it."""
    try:
        match = _locator(config).locate(_read(file), excerpt)
    except (AnchorPatchError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Strategy: {match.strategy.value}")
    typer.echo(f"Range: [{match.start}, {match.end})")
    typer.echo(f"Lines: {match.start_line + 1}-{match.end_line + 1}")
    typer.echo("Matched text:")
    typer.echo(match.matched_text)


@app.command()
def replace(
    file: Annotated[Path, typer.Argument(help="Path to the document")],
    find: Annotated[str, typer.Option("--find", "-f", help="Text to replace")],
    replacement: Annotated[str, typer.Option("--replace", "-r", help="Replacement text")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    config: ConfigOption = None,
) -> None:
    """Locate text (tolerating rendering differences) and replace it."""
    try:
        text = _read(file)
        match = _locator(config).locate(text, find)
        new_text = text[: match.start] + replacement + text[match.end :]
        output_path = output or file
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(new_text)
    except (AnchorPatchError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Replaced {match} and saved to {output_path}")


@app.command()
def files(
    root: Annotated[Path, typer.Argument(help="Document root directory")],
) -> None:
    """List reviewable documents under a root directory."""
    for document_id in FileDocumentStore(root).list_documents():
        typer.echo(document_id)


@app.command()
def comments(
    root: Annotated[Path, typer.Argument(help="Document root directory")],
    document: Annotated[
        str | None, typer.Option("--document", "-d", help="Only this document")
    ] = None,
    store: StoreOption = None,
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Include resolved annotations")
    ] = False,
) -> None:
    """List annotations and their proposed patches."""
    try:
        annotations: list[Annotation] = _session(root, store, None).list_annotations(document)
    except (AnchorPatchError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    shown = [a for a in annotations if show_all or a.is_open]
    if not shown:
        typer.echo("No annotations")
        return

    for annotation in shown:
        typer.echo(str(annotation))
        if annotation.proposed_patch:
            typer.echo(f"    - {annotation.proposed_patch.original!r}")
            typer.echo(f"    + {annotation.proposed_patch.replacement!r}")


@app.command()
def accept(
    root: Annotated[Path, typer.Argument(help="Document root directory")],
    annotation_id: Annotated[str, typer.Argument(help="Annotation id")],
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Apply an annotation's proposed patch to its document."""
    try:
        result = _session(root, store, config).accept(annotation_id)
    except (AnchorPatchError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not result.success:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(1)
    typer.echo(str(result))


@app.command()
def reject(
    root: Annotated[Path, typer.Argument(help="Document root directory")],
    annotation_id: Annotated[str, typer.Argument(help="Annotation id")],
    store: StoreOption = None,
) -> None:
    """Discard an annotation's proposed patch."""
    try:
        result = _session(root, store, None).reject(annotation_id)
    except (AnchorPatchError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not result.success:
        typer.echo(f"Error: {result.message}", err=True)
        raise typer.Exit(1)
    typer.echo(str(result))


if __name__ == "__main__":
    app()

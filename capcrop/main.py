"""
main.py

Package capcrop
"""

import logging
from pathlib import Path
from typing import Annotated

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from typer import Exit, Typer, Option, Argument

from capcrop.constants import DEFAULT_OUTPUT_HEIGHT, DEFAULT_OUTPUT_WIDTH
from capcrop.errors import CapcropError
from capcrop.models import OutputDimensions, Selection
from capcrop.session import Workspace

app = Typer(help='Crop and caption images into a fixed-size dataset.')
console = Console(soft_wrap=True)
logger = logging.getLogger(__name__)

FolderArgument = Annotated[
    Path, Argument(help='Folder containing the source images.', exists=True, file_okay=False)
]
ImageArgument = Annotated[str, Argument(help='Image filename, relative to the folder.')]


@app.callback()
def callback(
        verbose: bool = Option(False, "-v", "--verbose", help='Show verbose output.')
):
    logging.basicConfig(
        level="DEBUG" if verbose else "INFO", format="%(message)s", datefmt="[%X]", handlers=[RichHandler()]
    )


def _open(folder: Path, width: int = DEFAULT_OUTPUT_WIDTH, height: int = DEFAULT_OUTPUT_HEIGHT) -> Workspace:
    workspace = Workspace(OutputDimensions(width, height))
    workspace.open_folder(folder)
    return workspace


@app.command()
def files(folder: FolderArgument):
    """List the images in a folder."""
    try:
        names = _open(folder).list_images()
    except CapcropError as e:
        logger.error(str(e))
        raise Exit(1) from e
    for name in names:
        console.print(name, highlight=False)


@app.command()
def info(folder: FolderArgument, image: ImageArgument):
    """Show the dimensions and format of a source image."""
    try:
        meta = _open(folder).image_metadata(image)
    except CapcropError as e:
        logger.error(str(e))
        raise Exit(1) from e
    console.print(f'{image}: {meta.width}x{meta.height} {meta.format or "unknown"} ({meta.mode})', highlight=False)


@app.command()
def crop(
        folder: FolderArgument,
        image: ImageArgument,
        x: Annotated[float, Option("--x", help='Left edge of the selection, in source pixels.')],
        y: Annotated[float, Option("--y", help='Top edge of the selection, in source pixels.')],
        width: Annotated[float, Option("--width", help='Width of the selection.')],
        height: Annotated[float, Option("--height", help='Height of the selection.')],
        caption: Annotated[str, Option("--caption", "-c", help='Caption stored with the output.')] = "",
        output_width: Annotated[int, Option(help='Width of the output image.', min=1)] = DEFAULT_OUTPUT_WIDTH,
        output_height: Annotated[int, Option(help='Height of the output image.', min=1)] = DEFAULT_OUTPUT_HEIGHT,
):
    """Crop a selection out of an image, normalize it and record its caption."""
    try:
        workspace = _open(folder, output_width, output_height)
        output = workspace.save_selection(image, Selection(x, y, width, height), caption)
    except CapcropError as e:
        logger.error(str(e))
        raise Exit(1) from e
    console.print(str(output), highlight=False)


@app.command()
def captions(folder: FolderArgument):
    """Show the saved selections and captions of a folder."""
    entries = _open(folder).entries()
    if not entries:
        console.print('No saved selections.')
        return

    table = Table('Image', 'Selection', 'Caption')
    for entry in entries:
        sel = entry.selection
        table.add_row(entry.image_path, f'{sel.x},{sel.y} {sel.width}x{sel.height}', entry.caption)
    console.print(table)


@app.command()
def selection(folder: FolderArgument, image: ImageArgument):
    """Show the selection saved for an image."""
    sel = _open(folder).selection_for(image)
    if sel is None:
        console.print(f'No selection saved for {image}.', highlight=False)
        raise Exit(1)
    console.print(f'x={sel.x} y={sel.y} width={sel.width} height={sel.height}', highlight=False)


@app.command()
def clone(folder: FolderArgument, image: ImageArgument):
    """Copy an image so it can be cropped a second time."""
    try:
        new_name = _open(folder).clone_image(image)
    except CapcropError as e:
        logger.error(str(e))
        raise Exit(1) from e
    console.print(new_name, highlight=False)


if __name__ == '__main__':
    app()

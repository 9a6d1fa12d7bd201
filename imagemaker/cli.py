"""
Command-line interface for the ImageMaker package.

This module provides the CLI commands for the ImageMaker package:
- upload: Store an image, optionally resizing it and creating a thumbnail
- get: Print the URL of an image, falling back to a placeholder
- placeholder: Print the URL of a placeholder of a given size
- remove: Remove an image and its thumbnail
"""

import sys
import click
from typing import Optional, Tuple

from imagemaker import __version__
from imagemaker.core.error_handler import ImageMakerError, log_error
from imagemaker.core.logging_config import get_logger, configure_logging, log_execution_context

logger = get_logger(__name__)

def parse_color_option(ctx, param, value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """
    Parse an "R,G,B" option value.
    """
    if value is None:
        return None
    try:
        channels = tuple(int(part) for part in value.split(","))
    except ValueError:
        raise click.BadParameter("expected three comma-separated integers, e.g. 200,200,200")
    if len(channels) != 3:
        raise click.BadParameter("expected three comma-separated integers, e.g. 200,200,200")
    return channels

def get_pipeline(ctx: click.Context):
    """
    Build the pipeline for the disk chosen on the command line.
    """
    from imagemaker.pipeline.asset_pipeline import AssetPipeline

    if ctx.obj.get("pipeline") is None:
        ctx.obj["pipeline"] = AssetPipeline.from_config(ctx.obj.get("disk"))
    return ctx.obj["pipeline"]

def fail(error: ImageMakerError) -> None:
    """
    Report an error and exit with status 1.
    """
    log_error(error)
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)

@click.group()
@click.version_option(version=__version__)
@click.option('--disk', type=str, default=None, help='Storage disk to use (default: storage.default_disk from the configuration)')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
              default=None, help='Logging level (default: logging.level from the configuration)')
@click.pass_context
def main(ctx, disk: Optional[str] = None, log_level: Optional[str] = None):
    """
    ImageMaker - upload, resize and serve images with placeholder fallback.
    """
    ctx.ensure_object(dict)
    ctx.obj["disk"] = disk

    try:
        configure_logging(level=log_level)
    except ImageMakerError as e:
        fail(e)

@main.command()
@click.argument('source', type=str)
@click.argument('directory', type=str)
@click.option('--resize', type=str, help='Resize the stored image to WxH (aspect ratio is not preserved)')
@click.option('--thumb', type=str, help='Also write a WxH thumbnail next to the image')
@click.option('--replace', 'old', type=str, help='Filename of an image in DIRECTORY to remove once the upload succeeds')
@click.option('--mime', 'mime_type', type=str, help='Declared MIME type (default: guessed from SOURCE)')
@click.pass_context
def upload(ctx, source: str, directory: str, resize: Optional[str] = None, thumb: Optional[str] = None,
           old: Optional[str] = None, mime_type: Optional[str] = None):
    """
    Upload an image.

    SOURCE: Path of a local image file, or an http(s) URL to download

    DIRECTORY: Directory on the disk to store the image in

    Prints the generated filename.

    Examples:
      imagemaker upload photo.jpg images --resize 300x200 --thumb 50x50
      imagemaker upload https://example.com/logo.png logos --replace 0001.png
    """
    from imagemaker.assets.models import UploadRequest

    try:
        if source.startswith(('http://', 'https://')):
            request = UploadRequest.from_url(source)
            if mime_type:
                request.mime_type = mime_type
        else:
            try:
                request = UploadRequest.from_path(source, mime_type=mime_type)
            except OSError as e:
                click.echo(f"Error: cannot read {source}: {e}", err=True)
                sys.exit(1)

        log_execution_context(logger, {
            "source": source,
            "directory": directory,
            "mime_type": request.mime_type,
            "resize": resize,
            "thumb": thumb,
            "replace": old,
        })

        filename = get_pipeline(ctx).upload(request, directory, resize=resize, thumb=thumb, old=old)
    except ImageMakerError as e:
        fail(e)

    click.echo(filename)

@main.command()
@click.argument('directory', type=str)
@click.argument('filename', type=str)
@click.option('--size', type=str, default=None, help='Placeholder size used when the image is missing (default: 100x100)')
@click.option('--thumb', is_flag=True, default=False, help='Fall back to the thumbnail before using a placeholder')
@click.pass_context
def get(ctx, directory: str, filename: str, size: Optional[str] = None, thumb: bool = False):
    """
    Print the URL of an image, or of a placeholder if it does not exist.
    """
    try:
        url = get_pipeline(ctx).get(directory, filename, size=size, thumb=thumb)
    except ImageMakerError as e:
        fail(e)

    click.echo(url)

@main.command()
@click.argument('width', type=int)
@click.argument('height', type=int)
@click.option('--color', type=str, callback=parse_color_option, help='Background colour as R,G,B (default: 200,200,200)')
@click.pass_context
def placeholder(ctx, width: int, height: int, color: Optional[Tuple[int, int, int]] = None):
    """
    Print the URL of the WIDTH x HEIGHT placeholder, generating it if needed.
    """
    try:
        url = get_pipeline(ctx).placeholder(width, height, color)
    except ImageMakerError as e:
        fail(e)

    click.echo(url)

@main.command()
@click.argument('directory', type=str)
@click.argument('filename', type=str)
@click.pass_context
def remove(ctx, directory: str, filename: str):
    """
    Remove an image and its thumbnail.
    """
    try:
        removed = get_pipeline(ctx).remove(directory, filename)
    except ImageMakerError as e:
        fail(e)

    click.echo("removed" if removed else "not found")

if __name__ == '__main__':
    main()

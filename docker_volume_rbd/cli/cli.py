#!/usr/bin/env python3
"""
Main CLI entry point using Typer.
"""

import sys

import typer

from docker_volume_rbd.api import server
from docker_volume_rbd.cli.commands import image, volume

app = typer.Typer(
    name="rbdvol",
    help="RBD volume plugin control tool",
    add_completion=False,
)

# Add command groups
app.add_typer(volume.app, name="volume", help="Volume name commands")
app.add_typer(image.app, name="image", help="RBD image inspection commands")


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def serve(ctx: typer.Context):
    """
    Run the plugin daemon. Extra arguments are passed to docker-volume-rbd.
    """
    raise typer.Exit(server.main(list(ctx.args)))


def main() -> int:
    """Main entry point."""
    try:
        app()
        return 0
    except KeyboardInterrupt:
        typer.echo("\nOperation cancelled by user", err=True)
        return 130
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
RBD image inspection commands.
"""

import typer

from docker_volume_rbd.cli.lib.config import load_config
from docker_volume_rbd.cli.lib.names import parse_volume_name
from docker_volume_rbd.cli.lib.rbd import list_images, lock_list, parse_locker, show_mapped

app = typer.Typer(help="RBD image inspection commands")


@app.command()
def exists(name: str = typer.Argument(..., help="Volume name, [pool/]name[@size]")):
    """
    Check whether the image behind a volume exists.
    """
    try:
        cfg = load_config()
        spec = parse_volume_name(name, cfg.default_pool, cfg.default_size_mb)
        if spec.name in list_images(spec.pool):
            typer.echo(f"{spec.pool}/{spec.name} exists")
        else:
            typer.echo(f"{spec.pool}/{spec.name} does not exist")
            raise typer.Exit(2)
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error checking image: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def locks(name: str = typer.Argument(..., help="Volume name, [pool/]name[@size]")):
    """
    Show the locks of an image and the plugin's locker, if any.
    """
    try:
        cfg = load_config()
        spec = parse_volume_name(name, cfg.default_pool, cfg.default_size_mb)
        output = lock_list(spec.pool, spec.name)
        typer.echo(output.rstrip())
        locker = parse_locker(output, cfg.lock_id)
        typer.echo(f"{cfg.lock_id} holder: {locker or 'none'}")
    except Exception as e:
        typer.echo(f"Error listing locks: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def mapped():
    """
    List images mapped on this host.
    """
    try:
        devices = show_mapped()
        if not devices:
            typer.echo("No mapped images found")
            return
        for dev in devices:
            typer.echo(f"{dev.pool}/{dev.image} device={dev.device}")
    except Exception as e:
        typer.echo(f"Error listing mapped images: {e}", err=True)
        raise typer.Exit(1)

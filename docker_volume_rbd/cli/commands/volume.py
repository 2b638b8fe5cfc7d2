"""
Volume name commands.
"""

from typing import Optional

import typer

from docker_volume_rbd.cli.lib.config import load_config
from docker_volume_rbd.cli.lib.names import parse_volume_name, volume_mountpoint

app = typer.Typer(help="Volume name commands")


@app.command()
def parse(
    name: str = typer.Argument(..., help="Volume name, [pool/]name[@size]"),
    pool: Optional[str] = typer.Option(None, "--pool", help="Default pool (default: from config)"),
    size: Optional[int] = typer.Option(None, "--size", help="Default size in MB (default: from config)"),
):
    """
    Show how the plugin interprets a volume name.
    """
    try:
        cfg = load_config()
        spec = parse_volume_name(name, pool or cfg.default_pool, size or cfg.default_size_mb)
        typer.echo(f"pool={spec.pool}")
        typer.echo(f"name={spec.name}")
        typer.echo(f"size_mb={spec.size_mb}")
        typer.echo(f"mountpoint={volume_mountpoint(cfg.volume_root, spec.pool, spec.name)}")
    except Exception as e:
        typer.echo(f"Error parsing volume name: {e}", err=True)
        raise typer.Exit(1)

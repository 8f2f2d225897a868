"""Command line launcher for the emulator."""

import click
import uvicorn

from freee_beancount.emulator.config import EmulatorSettings


@click.command()
@click.option("--host", default=None, help="Bind address (overrides HOST)")
@click.option("--port", type=int, default=None, help="Port (overrides PORT)")
def serve(host: str | None, port: int | None):
    """Run the freee API emulator."""
    settings = EmulatorSettings()
    host = host or settings.host
    port = port or settings.port
    click.echo(f"Running emulator on {host}:{port} (db: {settings.db_path})")
    uvicorn.run(
        "freee_beancount.emulator.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level="info",
    )


def main():
    """Main entry point for the emulator."""
    serve()


if __name__ == "__main__":
    main()

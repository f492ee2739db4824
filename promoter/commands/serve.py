"""Promoter CLI - API server command"""

import click


@click.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option("--port", "-p", default=8401, type=int, help="Port to listen on")
def serve(host, port):
    """
    Run the HTTP API

    \b
    Routes:
      /api/deployment/*             direct operations
      /api/production-deployment/*  tracked deployments
    """
    from promoter.api import start_server

    click.echo(f"Promoter API listening on http://{host}:{port}")
    start_server(port=port, host=host)

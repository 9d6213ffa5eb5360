#!/usr/bin/env python3
"""
CLI for the media ownership pipeline.
"""

import click
from importlib.metadata import version
from commands import enrich, snapshot


@click.group()
@click.version_option(version=version("media-ownership"))
def cli():
    """Media Ownership CLI - Resolve who owns the media and publish enriched snapshots."""
    pass


# Register command groups
cli.add_command(enrich.enrich)
cli.add_command(snapshot.snapshot)


if __name__ == "__main__":
    cli()

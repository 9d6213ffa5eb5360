"""
Snapshot inspection commands.
"""

import click
from tabulate import tabulate

import settings
from db.database import Database
from db.export import SnapshotError, load_snapshot, read_manifest
from domain.snapshot_stats import concentration, global_stats


@click.group()
def snapshot():
    """Inspect enriched snapshots and enrichment runs."""
    pass


@snapshot.command()
@click.option('--limit', '-l', type=int, default=20, help='Number of snapshots to show (default: 20)')
def list(limit):
    """
    List snapshots recorded in the snapshot database.

    Example:
        ownership snapshot list
        ownership snapshot list --limit 5
    """
    db = Database(settings.SNAPSHOT_DB_PATH)
    session = db.get_session()

    try:
        snapshots = db.list_snapshots(session, limit=limit)

        if not snapshots:
            click.echo(click.style("No snapshots recorded", fg="yellow"))
            return

        table = [
            [s.version, s.created_at.strftime('%Y-%m-%d %H:%M'), s.medias_count, s.personnes_count, s.organisations_count, s.output_dir]
            for s in snapshots
        ]
        click.echo(tabulate(
            table,
            headers=['Version', 'Created', 'Médias', 'Personnes', 'Organisations', 'Directory'],
            tablefmt='simple'
        ))

    finally:
        session.close()
        db.dispose()


@snapshot.command()
@click.option('--limit', '-l', type=int, default=20, help='Number of runs to show (default: 20)')
@click.option('--errors', is_flag=True, help='Only show failed runs')
def runs(limit, errors):
    """
    List recent enrichment runs from the logs database.

    Example:
        ownership snapshot runs
        ownership snapshot runs --errors
    """
    db = Database(settings.LOGS_DB_PATH)
    session = db.get_session()

    try:
        entries = db.list_runs(session, limit=limit, failed_only=errors)

        if not entries:
            click.echo(click.style("No enrichment runs logged", fg="yellow"))
            return

        table = []
        for entry in entries:
            status = click.style('ok', fg='green') if entry.success else click.style('failed', fg='red')
            duration = f"{entry.duration_ms}ms" if entry.duration_ms is not None else '-'
            version = entry.snapshot_version if entry.snapshot_version is not None else '-'
            table.append([
                entry.id,
                entry.started_at.strftime('%Y-%m-%d %H:%M:%S'),
                status,
                duration,
                version,
                entry.error_message or ''
            ])

        click.echo(tabulate(
            table,
            headers=['ID', 'Started', 'Status', 'Duration', 'Snapshot', 'Error'],
            tablefmt='simple'
        ))

    finally:
        session.close()
        db.dispose()


@snapshot.command()
@click.option('--output-dir', '-o', default=None, help='Snapshot directory (default: SNAPSHOT_OUTPUT_DIR)')
@click.option('--top', '-t', type=int, default=10, help='Entries in concentration rankings (default: 10)')
def stats(output_dir, top):
    """
    Show statistics for the snapshot on disk.

    Example:
        ownership snapshot stats
        ownership snapshot stats --output-dir dist/enriched --top 5
    """
    output_dir = output_dir or settings.SNAPSHOT_OUTPUT_DIR

    try:
        collections = load_snapshot(output_dir)
        manifest = read_manifest(output_dir)
    except SnapshotError as e:
        click.echo(click.style(f"✗ {e}", fg="red"))
        click.echo(click.style("Run 'ownership enrich run' first to create the snapshot", fg="yellow"))
        raise click.Abort()

    summary = global_stats(collections)
    ranking = concentration(collections, top=top)

    click.echo(f"Snapshot: {click.style(output_dir, fg='cyan', bold=True)}")
    if manifest:
        click.echo(f"Version: {manifest.get('version')} ({manifest.get('created_at', '')[:19]})")
    click.echo()

    totals = summary['totals']
    click.echo(click.style("Totals:", fg='yellow', bold=True))
    click.echo(tabulate([
        ['Médias', totals['medias']],
        ['Personnes', totals['personnes']],
        ['Organisations', totals['organisations']],
        ['Médias disparus', summary['medias_disappeared']],
    ], tablefmt='plain'))
    click.echo()

    if summary['medias_by_type']:
        click.echo(click.style("Médias by type:", fg='yellow', bold=True))
        table = sorted(summary['medias_by_type'].items(), key=lambda item: item[1], reverse=True)
        click.echo(tabulate(table, headers=['Type', 'Count'], tablefmt='simple'))
        click.echo()

    if summary['medias_by_price']:
        click.echo(click.style("Médias by price:", fg='yellow', bold=True))
        table = sorted(summary['medias_by_price'].items(), key=lambda item: item[1], reverse=True)
        click.echo(tabulate(table, headers=['Price', 'Count'], tablefmt='simple'))
        click.echo()

    if ranking['personnes']:
        click.echo(click.style(f"Top {top} personnes by media held:", fg='yellow', bold=True))
        table = [[e['nom'], e['medias']] for e in ranking['personnes']]
        click.echo(tabulate(table, headers=['Personne', 'Médias'], tablefmt='simple'))
        click.echo()

    if ranking['organisations']:
        click.echo(click.style(f"Top {top} organisations by media held:", fg='yellow', bold=True))
        table = [[e['nom'], e['medias']] for e in ranking['organisations']]
        click.echo(tabulate(table, headers=['Organisation', 'Médias'], tablefmt='simple'))

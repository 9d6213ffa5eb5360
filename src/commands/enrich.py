"""
Enrichment commands.
"""

import traceback
import click
from tabulate import tabulate

import settings
from db.database import Database
from db.export import SnapshotError, write_snapshot
from domain.relation_index import RelationKind
from processors.enrich import EnrichmentContext, run_enrichment
from processors.loader import LoaderError, load_dataset
from processors.run_logging import log_enrichment_run


@click.group()
def enrich():
    """Build enriched snapshots from raw ownership data."""
    pass


@enrich.command()
@click.option('--input-dir', '-i', default=None, help='Raw data directory with main/ and detailed/ (default: DATA_INPUT_DIR)')
@click.option('--output-dir', '-o', default=None, help='Snapshot directory (default: SNAPSHOT_OUTPUT_DIR)')
@click.option('--no-db', is_flag=True, help='Do not record the snapshot in the snapshot database')
def run(input_dir, output_dir, no_db):
    """
    Load raw data, enrich media, persons and organisations, write the snapshot.

    Examples:
        ownership enrich run
        ownership enrich run --input-dir dist --output-dir dist/enriched
        ownership enrich run --no-db
    """
    input_dir = input_dir or settings.DATA_INPUT_DIR
    output_dir = output_dir or settings.SNAPSHOT_OUTPUT_DIR

    click.echo(click.style("Enriching ownership data...", fg='blue', bold=True))
    click.echo(f"  Input: {click.style(input_dir, fg='cyan')}")
    click.echo(f"  Output: {click.style(output_dir, fg='cyan')}")
    click.echo()

    db = None if no_db else Database(settings.SNAPSHOT_DB_PATH)
    session = db.get_session() if db else None

    try:
        with log_enrichment_run(input_dir, output_dir) as run_log:
            click.echo(click.style("=== Loading data ===", fg='green', bold=True))
            dataset = load_dataset(input_dir)
            counts = dataset.counts()
            click.echo(f"  Personnes: {counts['personnes']}")
            click.echo(f"  Médias: {counts['medias']}")
            click.echo(f"  Organisations: {counts['organisations']}")

            click.echo(click.style("\n=== Enriching ===", fg='green', bold=True))
            result = run_enrichment(dataset)
            run_log.set_counts(result.stats)
            click.echo(f"  {len(result.medias)} médias enrichis")
            click.echo(f"  {len(result.personnes)} personnes enrichies")
            click.echo(f"  {len(result.organisations)} organisations enrichies")
            click.echo(f"  {result.stats['ultimate_owner_paths']} ownership paths resolved")

            click.echo(click.style("\n=== Writing snapshot ===", fg='green', bold=True))
            manifest = write_snapshot(result, output_dir, session)
            run_log.set_snapshot_version(manifest.version)
            for filename in manifest.checksums:
                click.echo(f"  → {output_dir}/{filename}")

    except (LoaderError, SnapshotError) as e:
        click.echo(click.style(f"\n✗ Enrichment failed: {e}", fg='red'))
        if settings.DEBUG:
            traceback.print_exc()
        raise click.Abort()
    finally:
        if session is not None:
            session.close()
        if db is not None:
            db.dispose()

    click.echo()
    click.echo(click.style(f"✓ Snapshot v{manifest.version} written", fg='green', bold=True))
    click.echo(
        f"  Médias: {click.style(str(manifest.counts['medias']), fg='cyan')} | "
        f"Personnes: {click.style(str(manifest.counts['personnes']), fg='cyan')} | "
        f"Organisations: {click.style(str(manifest.counts['organisations']), fg='cyan')}"
    )


@enrich.command()
@click.argument('media')
@click.option('--input-dir', '-i', default=None, help='Raw data directory with main/ and detailed/ (default: DATA_INPUT_DIR)')
def chain(media, input_dir):
    """
    Show the direct and ultimate owners of one media outlet.

    Examples:
        ownership enrich chain "Le Monde"
        ownership enrich chain "le monde" --input-dir dist
    """
    input_dir = input_dir or settings.DATA_INPUT_DIR

    try:
        dataset = load_dataset(input_dir)
    except LoaderError as e:
        click.echo(click.style(f"✗ {e}", fg='red'))
        raise click.Abort()

    context = EnrichmentContext.from_dataset(dataset)
    name = context.medias.get(media)
    if name is None:
        click.echo(click.style(f"⚠ '{media}' is not in the media list, using relations only", fg='yellow'))
        name = media

    click.echo(click.style(f"\n{name}", fg='cyan', bold=True))

    owners = context.direct_owners(name, RelationKind.PERSONNE_MEDIA, RelationKind.ORGANISATION_MEDIA)
    if owners:
        click.echo(click.style("\nDirect owners:", fg='yellow', bold=True))
        table = [[o.nom, o.kind, f"{o.qualificatif} {o.valeur}".strip()] for o in owners]
        click.echo(tabulate(table, headers=['Owner', 'Kind', 'Stake'], tablefmt='simple'))
    else:
        click.echo(click.style("\nNo direct owners", fg='yellow'))

    paths = context.resolver.resolve_ultimate_owners(name)
    if paths:
        click.echo(click.style("\nUltimate owners:", fg='yellow', bold=True))
        table = [
            [i, path.person, ' → '.join(path.path), path.final_value]
            for i, path in enumerate(paths, 1)
        ]
        click.echo(tabulate(table, headers=['#', 'Person', 'Path', 'Final value'], tablefmt='simple'))
    else:
        click.echo(click.style("\nNo ultimate owners", fg='yellow'))

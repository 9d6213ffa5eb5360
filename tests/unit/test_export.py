"""
Unit tests for the snapshot writer.
"""

import json

import pytest

from db.database import Database
from db.export import SnapshotError, load_snapshot, next_version, read_manifest, write_snapshot
from processors.enrich import EnrichmentResult, run_enrichment


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / 'data' / 'snapshots.db'))
    yield database
    database.dispose()


class TestWriteSnapshot:
    """Tests for write_snapshot."""

    @pytest.mark.unit
    def test_writes_collections_and_manifest(self, le_monde_dataset, tmp_path):
        output_dir = tmp_path / 'enriched'
        manifest = write_snapshot(run_enrichment(le_monde_dataset), output_dir)

        for name in ('medias', 'personnes', 'organisations', 'manifest'):
            assert (output_dir / f'{name}.json').exists()

        assert manifest.version == 1
        assert manifest.counts == {'medias': 4, 'personnes': 2, 'organisations': 3}
        assert set(manifest.checksums) == {'medias.json', 'personnes.json', 'organisations.json'}
        assert read_manifest(output_dir)['version'] == 1

    @pytest.mark.unit
    def test_published_format(self, le_monde_dataset, tmp_path):
        """Files use the published keys and keep accents unescaped."""
        output_dir = tmp_path / 'enriched'
        write_snapshot(run_enrichment(le_monde_dataset), output_dir)

        raw = (output_dir / 'medias.json').read_text(encoding='utf-8')
        assert 'Télérama' in raw

        medias = json.loads(raw)
        le_monde = medias[0]
        assert le_monde['chaineProprietaires'][0]['valeurFinale'] == '100%'
        assert set(le_monde) == {
            'nom', 'type', 'periodicite', 'echelle', 'prix', 'disparu',
            'proprietaires', 'chaineProprietaires'
        }

        personnes = json.loads((output_dir / 'personnes.json').read_text(encoding='utf-8'))
        assert personnes[1]['classements']['challenges2024'] is None
        assert 'via' not in json.dumps(personnes[1]['mediasDirects'])

    @pytest.mark.unit
    def test_byte_identical_reruns(self, le_monde_dataset, tmp_path):
        """Identical input gives identical files and checksums."""
        first = write_snapshot(run_enrichment(le_monde_dataset), tmp_path / 'a')
        second = write_snapshot(run_enrichment(le_monde_dataset), tmp_path / 'b')

        assert first.checksums == second.checksums
        for name in ('medias', 'personnes', 'organisations'):
            assert (tmp_path / 'a' / f'{name}.json').read_bytes() == (tmp_path / 'b' / f'{name}.json').read_bytes()

    @pytest.mark.unit
    def test_version_increments(self, le_monde_dataset, tmp_path):
        output_dir = tmp_path / 'enriched'
        result = run_enrichment(le_monde_dataset)

        assert write_snapshot(result, output_dir).version == 1
        assert write_snapshot(result, output_dir).version == 2

    @pytest.mark.unit
    def test_replaces_previous_snapshot(self, le_monde_dataset, tmp_path):
        output_dir = tmp_path / 'enriched'
        write_snapshot(run_enrichment(le_monde_dataset), output_dir)
        write_snapshot(EnrichmentResult(), output_dir)

        collections = load_snapshot(output_dir)
        assert collections == {'medias': [], 'personnes': [], 'organisations': []}
        assert not [p for p in output_dir.iterdir() if p.name.endswith('.tmp')]

    @pytest.mark.unit
    def test_serialization_error_writes_nothing(self, tmp_path):
        """A record that cannot be serialized aborts before any file is written."""

        class Broken:
            def to_json_dict(self):
                return {'nom': object()}

        output_dir = tmp_path / 'enriched'
        with pytest.raises(SnapshotError, match='Cannot serialize'):
            write_snapshot(EnrichmentResult(organisations=[Broken()]), output_dir)

        assert not output_dir.exists()

    @pytest.mark.unit
    def test_records_snapshot_in_database(self, le_monde_dataset, tmp_path, db):
        session = db.get_session()
        try:
            manifest = write_snapshot(run_enrichment(le_monde_dataset), tmp_path / 'enriched', session)

            latest = db.latest_snapshot(session)
            assert latest.version == manifest.version
            assert latest.medias_count == 4
            assert latest.checksums == manifest.checksums
        finally:
            session.close()

    @pytest.mark.unit
    def test_version_follows_database(self, le_monde_dataset, tmp_path, db):
        """A fresh directory continues the version sequence of the database."""
        session = db.get_session()
        try:
            result = run_enrichment(le_monde_dataset)
            write_snapshot(result, tmp_path / 'first', session)
            manifest = write_snapshot(result, tmp_path / 'second', session)

            assert manifest.version == 2
            assert [s.version for s in db.list_snapshots(session)] == [2, 1]
        finally:
            session.close()


class TestLoadSnapshot:
    """Tests for load_snapshot and read_manifest."""

    @pytest.mark.unit
    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(SnapshotError, match='not found'):
            load_snapshot(tmp_path)

    @pytest.mark.unit
    def test_no_manifest(self, tmp_path):
        assert read_manifest(tmp_path) is None

    @pytest.mark.unit
    def test_invalid_manifest(self, tmp_path):
        (tmp_path / 'manifest.json').write_text('[', encoding='utf-8')

        with pytest.raises(SnapshotError, match='Cannot read manifest'):
            read_manifest(tmp_path)


class TestNextVersion:
    """Tests for next_version."""

    @pytest.mark.unit
    def test_empty_directory(self, tmp_path):
        assert next_version(tmp_path) == 1

    @pytest.mark.unit
    def test_follows_manifest(self, tmp_path):
        (tmp_path / 'manifest.json').write_text(json.dumps({'version': 4}), encoding='utf-8')

        assert next_version(tmp_path) == 5

    @pytest.mark.unit
    @pytest.mark.parametrize('content', [{'version': 'abc'}, {'version': None}, [1, 2]])
    def test_unusable_version_raises(self, tmp_path, content):
        """A manifest without a numeric version is reported as a snapshot error."""
        (tmp_path / 'manifest.json').write_text(json.dumps(content), encoding='utf-8')

        with pytest.raises(SnapshotError, match='Invalid manifest'):
            next_version(tmp_path)

    @pytest.mark.unit
    def test_corrupt_manifest_writes_nothing(self, le_monde_dataset, tmp_path):
        (tmp_path / 'manifest.json').write_text(json.dumps({'version': 'abc'}), encoding='utf-8')

        with pytest.raises(SnapshotError):
            write_snapshot(run_enrichment(le_monde_dataset), tmp_path)

        assert not (tmp_path / 'medias.json').exists()

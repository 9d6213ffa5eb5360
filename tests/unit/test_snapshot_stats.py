"""
Unit tests for snapshot statistics.
"""

import pytest

from domain.snapshot_stats import concentration, global_stats
from processors.enrich import run_enrichment


def as_collections(result):
    return {name: [r.to_json_dict() for r in records] for name, records in result.collections()}


class TestGlobalStats:
    """Tests for global_stats."""

    @pytest.mark.unit
    def test_totals_and_breakdowns(self, le_monde_dataset):
        stats = global_stats(as_collections(run_enrichment(le_monde_dataset)))

        assert stats['totals'] == {'medias': 4, 'personnes': 2, 'organisations': 3}
        assert stats['medias_by_type'] == {'Quotidien': 2, 'Hebdomadaire': 2}
        assert stats['medias_by_price'] == {'Payant': 3, 'Gratuit': 1}
        assert stats['medias_disappeared'] == 1

    @pytest.mark.unit
    def test_empty_snapshot(self):
        stats = global_stats({})

        assert stats['totals'] == {'medias': 0, 'personnes': 0, 'organisations': 0}
        assert stats['medias_by_type'] == {}
        assert stats['medias_disappeared'] == 0


class TestConcentration:
    """Tests for concentration rankings."""

    @pytest.mark.unit
    def test_rankings(self, le_monde_dataset):
        ranking = concentration(as_collections(run_enrichment(le_monde_dataset)))

        # Ties keep snapshot order
        assert ranking['personnes'] == [
            {'nom': 'Xavier Niel', 'medias': 1},
            {'nom': 'Matthieu Pigasse', 'medias': 1},
        ]
        assert ranking['organisations'] == [
            {'nom': 'Groupe Le Monde', 'medias': 2},
            {'nom': 'Le Monde libre', 'medias': 1},
        ]

    @pytest.mark.unit
    def test_top_limit(self):
        collections = {
            'organisations': [
                {'nom': f'Org {i}', 'medias': [{}] * i} for i in range(1, 6)
            ]
        }

        ranking = concentration(collections, top=2)
        assert [e['nom'] for e in ranking['organisations']] == ['Org 5', 'Org 4']
        assert ranking['personnes'] == []

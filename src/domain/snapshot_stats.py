"""
Summary statistics over an enriched snapshot.

Works on the collections as read back from disk (plain dicts with the
published keys), so it can inspect any snapshot without re-running the
enrichment.
"""

from collections import Counter
from typing import Dict, List


def global_stats(collections: Dict[str, list]) -> Dict:
    """
    Totals per entity kind and media breakdowns.

    Args:
        collections: {'medias': [...], 'personnes': [...], 'organisations': [...]}

    Returns:
        Dictionary with totals, media counts by type and by price, and the
        number of media that no longer exist
    """
    medias = collections.get('medias', [])
    personnes = collections.get('personnes', [])
    organisations = collections.get('organisations', [])

    by_type = Counter(m['type'] for m in medias if m.get('type'))
    by_price = Counter(m['prix'] for m in medias if m.get('prix'))

    return {
        'totals': {
            'medias': len(medias),
            'personnes': len(personnes),
            'organisations': len(organisations),
        },
        'medias_by_type': dict(by_type),
        'medias_by_price': dict(by_price),
        'medias_disappeared': sum(1 for m in medias if m.get('disparu')),
    }


def concentration(collections: Dict[str, list], top: int = 10) -> Dict[str, List[Dict]]:
    """
    Persons and organisations holding the most media.

    Persons count media held directly plus media held through organisations;
    organisations count media held directly. Entities holding nothing are left
    out. Ties keep snapshot order.

    Args:
        collections: Snapshot collections
        top: Number of entries per ranking

    Returns:
        {'personnes': [{'nom', 'medias'}...], 'organisations': [...]}
    """
    personnes = [
        {
            'nom': p['nom'],
            'medias': len(p.get('mediasDirects', [])) + len(p.get('mediasViaOrganisations', [])),
        }
        for p in collections.get('personnes', [])
    ]
    organisations = [
        {'nom': o['nom'], 'medias': len(o.get('medias', []))}
        for o in collections.get('organisations', [])
    ]

    def ranking(entries):
        held = [e for e in entries if e['medias'] > 0]
        # sorted() is stable: equal counts stay in snapshot order
        return sorted(held, key=lambda e: e['medias'], reverse=True)[:top]

    return {
        'personnes': ranking(personnes),
        'organisations': ranking(organisations),
    }

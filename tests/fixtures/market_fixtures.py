"""
Gamma API payloads for tests
"""

import json
from typing import Dict, List

from config.settings import DEFAULT_SLUG_PREFIX

SLUG_A = DEFAULT_SLUG_PREFIX + "october-24"
SLUG_B = DEFAULT_SLUG_PREFIX + "october-31"


def make_market(outcomes: List, token_ids: List, encode: bool = True, **extra) -> Dict:
    """Build a Gamma market payload; encode=True mimics the JSON-string list fields"""
    market = {
        'id': extra.pop('id', '1'),
        'question': extra.pop('question', 'Test market?'),
        'outcomes': json.dumps(outcomes) if encode else outcomes,
        'clobTokenIds': json.dumps(token_ids) if encode else token_ids,
    }
    market.update(extra)
    return market


def make_event(slug: str, token_suffix: str = "a", end_date: str = '2025-10-24T16:00:00Z') -> Dict:
    """Weekly event with one multi-outcome market listing ChatGPT"""
    return {
        'slug': slug,
        'title': f"#1 Free App in the US Apple App Store ({slug.rsplit('-on-', 1)[-1]})",
        'endDate': end_date,
        'markets': [make_market(["Threads", "ChatGPT"], [f"threads-{token_suffix}", f"chatgpt-{token_suffix}"])],
    }


def make_listing_entry(slug: str, end_date: str = '2025-10-24T16:00:00Z') -> Dict:
    return {'slug': slug, 'title': 'Weekly', 'endDate': end_date}

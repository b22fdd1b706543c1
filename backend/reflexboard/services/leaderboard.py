"""Read-time projections over the score records.

The public board keeps one best record per submitter. Submitters are told
apart by ``ipKey``, falling back to ``ipMasked`` and then to the lower-cased
nickname when older or partial records lack the stronger keys. The fallback
is a best effort: two players behind one masked prefix, or one player under
two nicknames, will be merged or split accordingly.

Records whose score is not a number are left off the board.
"""
import math
from typing import Dict, Iterable, List, Optional


def grouping_key(record: dict) -> Optional[str]:
    key = record.get('ipKey') or record.get('ipMasked')
    if key:
        return key
    nickname = str(record.get('nickname') or '').strip().lower()
    return nickname or None


def has_valid_score(record: dict) -> bool:
    score = record.get('score')
    # bool is an int subclass
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return False
    return isinstance(score, int) or math.isfinite(score)


def _rank(record: dict):
    return (record['score'], str(record.get('playedAt') or ''))


def best_per_identity(records: Iterable[dict]) -> List[dict]:
    best: Dict[str, dict] = {}
    for record in records:
        key = grouping_key(record)
        if key is None or not has_valid_score(record):
            continue
        current = best.get(key)
        if current is None or _rank(record) > _rank(current):
            best[key] = record
    return list(best.values())


def top_scores(records: Iterable[dict], limit: int) -> List[dict]:
    """Best record per submitter, highest score first, newest first on ties."""
    ranked = sorted(best_per_identity(records), key=_rank, reverse=True)
    return ranked[:max(0, limit)]


def public_entry(record: dict) -> dict:
    entry = {'score': record.get('score'), 'ipMasked': record.get('ipMasked')}
    if record.get('nickname'):
        entry['nickname'] = record['nickname']
    return entry


def public_leaderboard(records: Iterable[dict], limit: int) -> List[dict]:
    return [public_entry(r) for r in top_scores(records, limit)]


def recent_first(records: Iterable[dict]) -> List[dict]:
    """All records, newest first. Equal stamps keep later appends first."""
    return sorted(reversed(list(records)), key=lambda r: str(r.get('playedAt') or ''), reverse=True)

from typing import Any, Dict, List, Mapping, Optional

from synchub.events import is_finite_number


def _score_of(state: Any):
    if isinstance(state, Mapping):
        score = state.get('score')
    else:
        score = getattr(state, 'score', None)
    return score if is_finite_number(score) else 0


def derive_leaderboard(players: Mapping[str, Any], limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Rank players by score, highest first.

    Equal scores are ordered by ascending connection id so the same
    snapshot always yields the same ranking. A missing or non-numeric
    score counts as 0.
    """
    entries = [{'id': sid, 'score': _score_of(state)} for sid, state in players.items()]
    entries.sort(key=lambda e: (-e['score'], str(e['id'])))
    if limit is not None:
        return entries[: max(0, int(limit))]
    return entries

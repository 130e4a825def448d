from synchub.models import PlayerState
from synchub.services.session import derive_leaderboard


def test_sorted_descending_by_score():
    players = {
        'a': PlayerState(score=1),
        'b': PlayerState(score=10),
        'c': PlayerState(score=5),
    }
    assert [e['id'] for e in derive_leaderboard(players)] == ['b', 'c', 'a']


def test_ties_break_on_ascending_id():
    players = {
        'zed': PlayerState(score=3),
        'amy': PlayerState(score=3),
        'kim': PlayerState(score=7),
        'bob': PlayerState(score=3),
    }
    board = derive_leaderboard(players)
    assert board == [
        {'id': 'kim', 'score': 7},
        {'id': 'amy', 'score': 3},
        {'id': 'bob', 'score': 3},
        {'id': 'zed', 'score': 3},
    ]


def test_repeated_calls_are_identical():
    players = {sid: PlayerState(score=sid_score) for sid, sid_score in
               [('q', 2), ('w', 2), ('e', 0), ('r', 2.5), ('t', 0)]}
    assert derive_leaderboard(players) == derive_leaderboard(players)


def test_missing_or_invalid_score_counts_as_zero():
    players = {
        'a': {'x': 1},
        'b': {'score': 'lots'},
        'c': {'score': -1},
        'd': {'score': float('nan')},
    }
    assert derive_leaderboard(players) == [
        {'id': 'a', 'score': 0},
        {'id': 'b', 'score': 0},
        {'id': 'd', 'score': 0},
        {'id': 'c', 'score': -1},
    ]


def test_empty_and_limit():
    assert derive_leaderboard({}) == []
    players = {'a': PlayerState(score=1), 'b': PlayerState(score=2), 'c': PlayerState(score=3)}
    assert derive_leaderboard(players, limit=2) == [{'id': 'c', 'score': 3}, {'id': 'b', 'score': 2}]
    assert derive_leaderboard(players, limit=0) == []

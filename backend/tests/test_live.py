from app.services.scores.live import top_scores
from app.services.scores.validation import ValidScore


def _add(store, name, waves, kills):
    return store.append_score(ValidScore(name=name, waves=waves, kills=kills))


def test_top_scores_orders_by_waves_then_kills(flask_app):
    from app import score_store
    _add(score_store, 'a', 5, 10)
    _add(score_store, 'b', 9, 1)
    _add(score_store, 'c', 5, 50)
    assert [e['name'] for e in top_scores()] == ['b', 'c', 'a']


def test_ties_keep_the_older_score_first(flask_app):
    from app import score_store
    _add(score_store, 'first', 5, 10)
    _add(score_store, 'second', 5, 10)
    assert [e['name'] for e in top_scores()] == ['first', 'second']


def test_top_scores_is_capped_at_25(flask_app):
    from app import score_store
    for i in range(30):
        _add(score_store, f'p{i}', 1 + i, 3 * (1 + i))
    entries = top_scores()
    assert len(entries) == 25
    assert entries[0]['waves'] == 30
    assert len(top_scores(100)) == 25
    assert len(top_scores(3)) == 3

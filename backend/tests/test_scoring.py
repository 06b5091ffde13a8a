from redlight.models import Player, Room
from redlight.services.rounds.scoring import all_clicked, compute_ranking


def _player(sid, name, reaction_time=None, score=0):
    return Player(sid=sid, name=name, reaction_time=reaction_time,
                  has_clicked=reaction_time is not None, score=score)


def test_ranking_orders_fastest_first_and_assigns_points():
    a = _player('a', 'Alice', 0.30)
    b = _player('b', 'Bob', 0.10)
    c = _player('c', 'Cara', 0.50)

    ranking = compute_ranking([a, b, c])

    assert [e.reaction_time for e in ranking] == [0.10, 0.30, 0.50]
    assert [e.name for e in ranking] == ['Bob', 'Alice', 'Cara']
    # per player, in input order
    assert [a.score, b.score, c.score] == [2, 3, 1]


def test_ranking_adds_to_existing_score():
    a = _player('a', 'Alice', 0.2, score=3)
    ranking = compute_ranking([a])
    assert ranking[0].points == 1
    assert ranking[0].score == 4
    assert a.score == 4


def test_ties_keep_incoming_order():
    a = _player('a', 'Alice', 0.25)
    b = _player('b', 'Bob', 0.25)
    ranking = compute_ranking([a, b])
    assert [e.name for e in ranking] == ['Alice', 'Bob']
    assert [e.points for e in ranking] == [2, 1]


def test_players_without_time_are_not_ranked():
    a = _player('a', 'Alice', 0.4)
    b = _player('b', 'Bob')
    ranking = compute_ranking([a, b])
    assert [e.name for e in ranking] == ['Alice']
    assert ranking[0].points == 1
    assert b.score == 0


def test_entry_wire_format():
    entry = compute_ranking([_player('a', 'Alice', 0.123)])[0]
    assert entry.to_dict() == {'name': 'Alice', 'reactionTime': 0.123, 'points': 1, 'score': 1}


def test_all_clicked():
    room = Room(code='ABCDE', host_id='h')
    assert not all_clicked(room)
    room.players['a'] = _player('a', 'Alice', 0.1)
    room.players['b'] = _player('b', 'Bob')
    assert not all_clicked(room)
    room.players['b'].has_clicked = True
    assert all_clicked(room)

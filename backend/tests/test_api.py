def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_json()['endpoints']['players'] == '/api/players'


def test_health(client, sio_client):
    data = client.get('/health').get_json()
    assert data['ok'] is True
    assert data['players'] == 1
    assert data['rooms'] == 0


def test_players_empty(client):
    res = client.get('/api/players')
    assert res.status_code == 200
    assert res.get_json() == {}


def test_players_and_leaderboard(client, sio_factory):
    first = sio_factory()
    second = sio_factory()
    sid1 = [p['args'][0] for p in first.get_received() if p['name'] == 'your_id'][0]
    sid2 = [p['args'][0] for p in second.get_received() if p['name'] == 'your_id'][0]
    second.emit('score_update', {'score': 3})

    players = client.get('/api/players').get_json()
    assert set(players) == {sid1, sid2}
    assert players[sid2]['score'] == 3

    board = client.get('/api/leaderboard').get_json()
    assert board[0] == {'id': sid2, 'score': 3}
    assert client.get('/api/leaderboard?limit=1').get_json() == [{'id': sid2, 'score': 3}]


def test_leaderboard_rejects_bad_limit(client):
    assert client.get('/api/leaderboard?limit=abc').status_code == 400
    assert client.get('/api/leaderboard?limit=-2').status_code == 400


def test_rooms(client, sio_client):
    sid = [p['args'][0] for p in sio_client.get_received() if p['name'] == 'your_id'][0]
    sio_client.emit('join_room', {'room': 'arena'})
    assert client.get('/api/rooms').get_json() == {'arena': [sid]}


def test_reads_have_no_side_effects(client, sio_client):
    sio_client.get_received()
    client.get('/api/players')
    client.get('/api/leaderboard')
    assert sio_client.get_received() == []


def test_show_config_command(flask_app):
    result = flask_app.test_cli_runner().invoke(args=['show-config'])
    assert result.exit_code == 0
    assert 'port=3000' in result.output
    assert 'ping_interval=10s ping_timeout=15s' in result.output

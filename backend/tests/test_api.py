def test_health_reports_counts(client, sio_factory):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok', 'lobbies': 0, 'players': 0}

    host = sio_factory()
    host.emit('create-lobby', {'playerId': 'a', 'playerName': 'Alice'}, callback=True)
    data = client.get('/').get_json()
    assert data['lobbies'] == 1
    assert data['players'] == 1


def test_lobbies_command_lists_active_lobbies(flask_app, sio_factory):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['lobbies'])
    assert result.exit_code == 0
    assert 'No active lobbies.' in result.output

    host = sio_factory()
    ack = host.emit('create-lobby', {'playerId': 'a', 'playerName': 'Alice'}, callback=True)
    result = runner.invoke(args=['lobbies'])
    assert result.exit_code == 0
    assert ack['lobbyId'] in result.output
    assert 'host=a' in result.output
    assert 'Alice(a)' in result.output

def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json() == {'ok': True}


def test_photo_count(client):
    res = client.get('/api/photos')
    assert res.status_code == 200
    assert res.get_json() == {'count': 6}


def test_unknown_room(client):
    res = client.get('/api/rooms/ZZZZZ')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'room_not_found'}


def test_room_state(client, make_sio_client):
    amy = make_sio_client()
    amy.emit('create_room', {'playerName': 'Amy', 'rounds': 3})
    code = amy.get_received()[0]['args'][0]['code']

    res = client.get(f'/api/rooms/{code.lower()}')
    assert res.status_code == 200
    state = res.get_json()
    assert state['code'] == code
    assert state['host'] == 'Amy'
    assert state['state'] == 'lobby'
    assert state['players'] == ['Amy']
    assert state['totalRounds'] == 3
    assert state['scoreboard'] == [{'name': 'Amy', 'score': 0}]
    assert 'timeLeft' not in state


def test_room_state_while_playing_hides_answer(flask_app, client, make_sio_client):
    amy = make_sio_client()
    bob = make_sio_client()
    amy.emit('create_room', {'playerName': 'Amy'})
    code = amy.get_received()[0]['args'][0]['code']
    bob.emit('join_room', {'playerName': 'Bob', 'code': code})
    amy.emit('start_game')

    state = client.get(f'/api/rooms/{code}').get_json()
    assert state['state'] == 'playing'
    assert 0 <= state['timeLeft'] <= 60
    room = flask_app.extensions['guesswho'].store.get_room(code)
    assert room.current_photo.answer not in str(state)


def test_list_rooms(client, make_sio_client):
    assert client.get('/api/rooms').get_json() == {'rooms': []}
    for name in ('Amy', 'Bob'):
        make_sio_client().emit('create_room', {'playerName': name})
    rooms = client.get('/api/rooms').get_json()['rooms']
    assert sorted(r['host'] for r in rooms) == ['Amy', 'Bob']

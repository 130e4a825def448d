from flask import Blueprint, current_app, jsonify, request

players = Blueprint('players', __name__)


def _coordinator():
    return current_app.extensions['synchub']


@players.route('/players', methods=['GET'])
def get_players():
    """Full current player snapshot, keyed by connection id."""
    return jsonify(_coordinator().players_snapshot())


@players.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    limit = request.args.get('limit')
    if limit is not None:
        try:
            limit = int(limit)
        except ValueError:
            return jsonify({'error': 'limit must be an integer'}), 400
        if limit < 0:
            return jsonify({'error': 'limit must not be negative'}), 400
    return jsonify(_coordinator().leaderboard(limit=limit))


@players.route('/rooms', methods=['GET'])
def get_rooms():
    return jsonify(_coordinator().rooms_snapshot())

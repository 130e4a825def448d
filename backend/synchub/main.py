from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


def _coordinator():
    return current_app.extensions['synchub']


@main.route('/')
def index():
    return jsonify({
        'message': 'Welcome to the synchub session server!',
        'endpoints': {
            'health': '/health',
            'players': '/api/players',
            'leaderboard': '/api/leaderboard',
            'rooms': '/api/rooms',
        },
    })


@main.route('/health')
def health():
    return jsonify({'ok': True, **_coordinator().stats()})

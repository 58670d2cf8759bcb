from flask import Blueprint, current_app, jsonify

players = Blueprint('players', __name__)


def _store():
    return current_app.extensions['player_stats']


@players.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    """
    Returns the top players by score, then wins, draws, fewest losses, name.
    """
    try:
        limit = int(current_app.config.get('LEADERBOARD_LIMIT', 10))
        return jsonify(_store().get_leaderboard(limit=limit))
    except Exception as e:
        current_app.logger.exception("[leaderboard] failed")
        return jsonify({'error': 'Failed to load leaderboard', 'details': str(e)}), 500


@players.route('/players/<string:name>', methods=['GET'])
def get_player(name):
    """
    Returns a player's stats. Unknown players are not created.
    """
    try:
        stats = _store().get_player_stats(name)
    except Exception as e:
        current_app.logger.exception(f"[player] lookup failed name={name!r}")
        return jsonify({'error': 'Failed to read player', 'details': str(e)}), 500
    if not stats:
        return jsonify({'message': 'Player not found'}), 404
    return jsonify(stats)

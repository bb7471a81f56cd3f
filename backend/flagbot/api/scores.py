from flask import Blueprint, jsonify
from flagbot.bot import get_bot


scores = Blueprint('scores', __name__)


@scores.route('', methods=['GET'])
def get_scores():
    """Current leaderboard, ranked the same way as the `scores` command."""
    board = get_bot().leaderboard()
    teams = []
    for rank, score in enumerate(board, start=1):
        entry = score.to_dict()
        entry['rank'] = rank
        entry['flag_count'] = score.flag_count
        teams.append(entry)
    return jsonify({'teams': teams, 'total_teams': len(teams)})

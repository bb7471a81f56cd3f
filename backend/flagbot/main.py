from flask import Blueprint, jsonify, current_app

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': f"Welcome to the {current_app.config.get('BOT_NAME', 'flagbot')} CTF server!"})

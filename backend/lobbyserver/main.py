from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def health():
    stats = current_app.extensions['lobby_service'].stats()
    return jsonify({'status': 'ok', **stats})

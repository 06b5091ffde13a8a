from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Redlight game server!'})

@main.route('/health')
def health():
    gateway = current_app.extensions['redlight']
    return jsonify({'ok': True, 'rooms': len(gateway.registry)})

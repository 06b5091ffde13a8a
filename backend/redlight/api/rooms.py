from flask import Blueprint, current_app, jsonify

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room_state(room_code):
    """Read-only snapshot of a live room."""
    gateway = current_app.extensions['redlight']
    room = gateway.registry.find_room(room_code)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404

    cfg = current_app.config
    with room.lock:
        payload = room.to_dict(host_name=cfg.get('HOST_DISPLAY_NAME', 'Host'))
    # Include the arm delay bounds so clients can explain the wait
    payload['armDelay'] = {
        'min': float(cfg.get('ARM_DELAY_MIN_SEC', 2.0)),
        'max': float(cfg.get('ARM_DELAY_MAX_SEC', 5.0)),
    }
    return jsonify(payload)

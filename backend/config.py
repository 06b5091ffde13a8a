import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed to open the socket
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    ).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Random wait before the red signal (seconds)
    ARM_DELAY_MIN_SEC = float(os.environ.get('ARM_DELAY_MIN_SEC', '2.0'))
    ARM_DELAY_MAX_SEC = float(os.environ.get('ARM_DELAY_MAX_SEC', '5.0'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '5'))
    # The host does not pick a name; this is what players see at the top of the list
    HOST_DISPLAY_NAME = os.environ.get('HOST_DISPLAY_NAME', 'Host')
    PLAYER_NAME_MAX_LEN = int(os.environ.get('PLAYER_NAME_MAX_LEN', '24'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

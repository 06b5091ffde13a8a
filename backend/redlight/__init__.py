from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

# One connection's events are handled one at a time, in arrival order
socketio = SocketIO(async_mode=None, async_handlers=False)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins, async_handlers=False)

    # Import and register blueprints here
    from redlight.main import main
    flask_app.register_blueprint(main)

    from redlight.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Room state lives for as long as this app does; the gateway is the
    # only thing holding the registry
    from redlight.services.rounds import ArmScheduler, RoomRegistry, RoundStateMachine
    from redlight.socketio_events import SocketGateway, register_socketio_handlers

    cfg = flask_app.config
    rounds = RoundStateMachine(
        arm_delay=(float(cfg.get('ARM_DELAY_MIN_SEC', 2.0)), float(cfg.get('ARM_DELAY_MAX_SEC', 5.0))),
        host_name=cfg.get('HOST_DISPLAY_NAME', 'Host'),
        max_name_len=int(cfg.get('PLAYER_NAME_MAX_LEN', 24)),
    )
    gateway = SocketGateway(
        socketio,
        registry=RoomRegistry(code_length=int(cfg.get('ROOM_CODE_LENGTH', 5))),
        rounds=rounds,
        # In tests timers fire inline for deterministic event order
        scheduler=ArmScheduler(socketio, inline=bool(cfg.get('TESTING'))),
        logger=flask_app.logger,
        namespace=cfg.get('SOCKETIO_NAMESPACE', '/'),
    )
    flask_app.extensions['redlight'] = gateway
    register_socketio_handlers(gateway)

    return flask_app

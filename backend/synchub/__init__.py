from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def _origins(value):
    if value == '*' or not value:
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _origins(flask_app.config.get('CORS_ALLOWED_ORIGINS', '*'))
    CORS(flask_app, origins=allowed_origins)

    # Transport liveness tuning belongs to the channel, not the core
    socketio.init_app(
        flask_app,
        cors_allowed_origins=allowed_origins,
        ping_interval=flask_app.config.get('PING_INTERVAL_SEC', 10),
        ping_timeout=flask_app.config.get('PING_TIMEOUT_SEC', 15),
        transports=flask_app.config.get('SOCKETIO_TRANSPORTS') or ['websocket'],
    )

    from synchub.channel import SocketIOChannel
    from synchub.services.session import SessionCoordinator
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    coordinator = SessionCoordinator(
        SocketIOChannel(socketio, namespace=namespace),
        heartbeat_interval_sec=flask_app.config.get('HEARTBEAT_INTERVAL_SEC', 0),
        runner=socketio,
        # In tests the heartbeat only runs when asked for, keeping emitted events deterministic
        autostart_heartbeat=(not flask_app.config.get('TESTING')
                             or bool(flask_app.config.get('ENABLE_HEARTBEAT_IN_TESTS'))),
        logger=flask_app.logger,
    )
    flask_app.extensions['synchub'] = coordinator

    # Import and register blueprints here
    from synchub.main import main
    flask_app.register_blueprint(main)

    from synchub.api.players import players
    flask_app.register_blueprint(players, url_prefix='/api')

    from synchub.socketio_events import register_socketio_handlers
    register_socketio_handlers(coordinator, namespace=namespace)

    @click.command('show-config')
    def show_config_command():
        """Prints the effective transport and heartbeat settings."""
        cfg = flask_app.config
        click.echo(f"host={cfg.get('HOST')} port={cfg.get('PORT')}")
        click.echo(f"namespace={namespace} transports={','.join(cfg.get('SOCKETIO_TRANSPORTS') or [])}")
        click.echo(f"ping_interval={cfg.get('PING_INTERVAL_SEC')}s ping_timeout={cfg.get('PING_TIMEOUT_SEC')}s")
        click.echo(f"heartbeat_interval={cfg.get('HEARTBEAT_INTERVAL_SEC')}s")
        click.echo(f"cors_allowed_origins={cfg.get('CORS_ALLOWED_ORIGINS')}")

    flask_app.cli.add_command(show_config_command)

    return flask_app

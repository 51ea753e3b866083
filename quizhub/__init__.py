import json

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


class QuizHub:
    """Per-app game state, kept in ``app.extensions['quizhub']``."""

    def __init__(self, engine, dispatcher):
        self.engine = engine
        self.dispatcher = dispatcher


def _allowed_origins(value):
    if not value or value.strip() == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS', '*'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from quizhub.dispatcher import Dispatcher
    from quizhub.services.games.engine import GameEngine
    from quizhub.services.games.scheduler import HostInactivityTimer

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    dispatcher = Dispatcher(socketio, namespace=namespace, logger=flask_app.logger)

    def host_timer(delay_sec, on_expire):
        return HostInactivityTimer(delay_sec, on_expire, socketio.start_background_task,
                                   socketio.sleep, logger=flask_app.logger)

    engine = GameEngine.from_config(flask_app.config, dispatcher, timer_factory=host_timer,
                                    logger=flask_app.logger)
    flask_app.extensions['quizhub'] = QuizHub(engine, dispatcher)

    from quizhub.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers on the freshly initialized server
    from quizhub.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    @click.command('check-quiz')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def check_quiz_command(path):
        """Validates a quiz JSON file and prints a summary."""
        from quizhub.errors import InvalidPayload
        from quizhub.schemas import parse_quiz

        with open(path, encoding='utf-8') as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as exc:
                raise click.ClickException(f'{path} is not valid JSON: {exc}')
        try:
            quiz = parse_quiz(data)
        except InvalidPayload as exc:
            raise click.ClickException('Invalid quiz: ' + '; '.join(exc.details))

        click.echo(f'{quiz.title or "(untitled)"}: {len(quiz.questions)} questions')
        for number, question in enumerate(quiz.questions, start=1):
            click.echo(f'  {number}. {question.text} ({question.time_limit}s, {len(question.options)} options)')

    flask_app.cli.add_command(check_quiz_command)

    return flask_app

from flask import current_app, request

from quizhub import socketio
from quizhub.errors import GameError, InvalidPayload
from quizhub.schemas import parse_command


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _engine():
    return current_app.extensions['quizhub'].engine


def _dispatcher():
    return current_app.extensions['quizhub'].dispatcher


def _run(event, data, action):
    """Parse ``data`` for ``event`` and hand the command to ``action``.

    Precondition failures go back to the sending connection only as
    ``game:error``; nothing is broadcast for a rejected command.
    """
    sid = _get_sid()
    try:
        command = parse_command(event, data)
        action(_engine(), sid, command)
    except InvalidPayload as exc:
        current_app.logger.warning(f"[bad-payload] event={event} sid={sid} details={exc.details}")
        _dispatcher().error(sid, exc.message)
    except GameError as exc:
        current_app.logger.info(f"[rejected] event={event} sid={sid} reason={exc.message!r}")
        _dispatcher().error(sid, exc.message)


def handle_connect(auth=None):
    _dispatcher().register(_get_sid())
    current_app.logger.debug(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    _dispatcher().unregister(sid)
    current_app.logger.debug(f"[disconnect] sid={sid} reason={reason}")
    _engine().disconnect(sid)


def handle_get_state(data=None):
    _run('get-state', data,
         lambda engine, sid, cmd: _dispatcher().send(sid, 'game:update', engine.view()))


def handle_host_create(data=None):
    _run('host:create', data,
         lambda engine, sid, cmd: engine.create(sid, cmd.host_id, cmd.quiz_data.to_quiz()))


def handle_host_rejoin(data=None):
    _run('host:rejoin', data, lambda engine, sid, cmd: engine.host_rejoin(sid, cmd.host_id))


def handle_host_toggle_pause(data=None):
    _run('host:toggle-pause', data, lambda engine, sid, cmd: engine.toggle_pause(sid))


def handle_player_join(data=None):
    _run('player:join', data,
         lambda engine, sid, cmd: engine.player_join(sid, cmd.player_id, cmd.nickname))


def handle_player_rejoin(data=None):
    _run('player:rejoin', data, lambda engine, sid, cmd: engine.player_rejoin(sid, cmd.player_id))


def handle_game_start(data=None):
    _run('game:start', data, lambda engine, sid, cmd: engine.start(sid))


def handle_player_answer(data=None):
    _run('player:answer', data,
         lambda engine, sid, cmd: engine.answer(sid, cmd.player_id, cmd.answer_index))


def handle_game_next(data=None):
    _run('game:next', data, lambda engine, sid, cmd: engine.advance(sid))


EVENT_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'get-state': handle_get_state,
    'game:get-state': handle_get_state,
    'host:create': handle_host_create,
    'host:rejoin': handle_host_rejoin,
    'host:toggle-pause': handle_host_toggle_pause,
    'player:join': handle_player_join,
    'player:rejoin': handle_player_rejoin,
    'game:start': handle_game_start,
    'player:answer': handle_player_answer,
    'game:next': handle_game_next,
}


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the game's Socket.IO event handlers on ``namespace``."""
    for event, handler in EVENT_HANDLERS.items():
        socketio.on_event(event, handler, namespace=namespace)

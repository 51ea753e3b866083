from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the quizhub game server!'})


@main.route('/health')
def health():
    engine = current_app.extensions['quizhub'].engine
    session = engine.session
    return jsonify({
        'status': 'ok',
        'active_game': session is not None,
        'state': session.state.value if session else None,
        'connections': len(current_app.extensions['quizhub'].dispatcher.connections()),
    })


@main.route('/api/state')
def get_state():
    """Same projected view a socket gets from get-state; null when no game is running."""
    return jsonify(current_app.extensions['quizhub'].engine.view())

import os


def _flag(name, default):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list; '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Seconds the session survives without a connected host
    HOST_INACTIVITY_TIMEOUT_SEC = float(os.environ.get('HOST_INACTIVITY_TIMEOUT_SEC', '300'))
    # Answering at timeLimit * factor or later earns nothing
    SCORE_DECAY_FACTOR = float(os.environ.get('SCORE_DECAY_FACTOR', '2.0'))
    # Flat bonus for the first correct answer of a question. 0 disables.
    FIRST_CORRECT_BONUS = int(os.environ.get('FIRST_CORRECT_BONUS', '0'))
    # Show the correct option and tally between QUESTION and LEADERBOARD
    REVEAL_ANSWER_STEP = _flag('REVEAL_ANSWER_STEP', 'true')
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '1'))

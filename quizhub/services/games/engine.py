import logging
import threading
import time
from typing import Callable, Optional

from quizhub.errors import GameError
from quizhub.identity import IdentityResolver
from quizhub.models import GameState, PAUSABLE_STATES, Player, Quiz, Session
from quizhub.projection import project_session
from .scoring import ScoringRules

NO_GAME = 'No game is currently active.'
GAME_STARTED = 'Game has already started.'
NICKNAME_TAKEN = 'This nickname is already taken.'
ALREADY_ANSWERED = 'You have already answered this question.'
INVALID_OPTION = 'Invalid answer option.'
CANNOT_ADVANCE = 'The game cannot advance right now.'

ENDED_NEW_GAME = 'The host has started a new game.'
ENDED_HOST_INACTIVE = 'The game ended because the host was inactive.'
ENDED_UNKNOWN_PLAYER = 'The game you were in has ended.'
ENDED_UNKNOWN_HOST = 'No active game found for this host.'


def wall_clock_ms() -> float:
    return time.time() * 1000.0


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class GameEngine:
    """Owns the single active session and is its only writer.

    Every public method takes the engine lock, validates the actor and the
    current state, then either applies its whole effect and broadcasts exactly
    once, returns False without touching anything (stale or unauthorized
    command), or raises GameError for the caller to report to the sender.
    """

    def __init__(self, dispatcher, rules: Optional[ScoringRules] = None,
                 clock: Callable[[], float] = wall_clock_ms,
                 monotonic: Callable[[], float] = monotonic_ms,
                 timer_factory: Optional[Callable] = None,
                 host_timeout_sec: float = 300.0,
                 reveal_step: bool = True,
                 min_players: int = 1,
                 logger=None):
        self.dispatcher = dispatcher
        self.rules = rules or ScoringRules()
        self.clock = clock
        self.monotonic = monotonic
        self.timer_factory = timer_factory
        self.host_timeout_sec = host_timeout_sec
        self.reveal_step = reveal_step
        self.min_players = max(1, int(min_players))
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._session: Optional[Session] = None
        self._timer = None

    @classmethod
    def from_config(cls, config, dispatcher, timer_factory=None, logger=None,
                    clock=wall_clock_ms, monotonic=monotonic_ms):
        return cls(
            dispatcher,
            rules=ScoringRules.from_config(config),
            clock=clock,
            monotonic=monotonic,
            timer_factory=timer_factory,
            host_timeout_sec=float(config.get('HOST_INACTIVITY_TIMEOUT_SEC', 300)),
            reveal_step=bool(config.get('REVEAL_ANSWER_STEP', True)),
            min_players=int(config.get('MIN_PLAYERS', 1)),
            logger=logger,
        )

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def host_timer(self):
        return self._timer

    def view(self):
        with self._lock:
            return project_session(self._session)

    # ---- lifecycle ----

    def create(self, sid, host_id: str, quiz: Quiz) -> bool:
        with self._lock:
            if self._session is not None:
                self._cancel_host_timer()
                self.logger.info(f"[replace] previous host={self._session.host_id} state={self._session.state.value}")
                self.dispatcher.ended(ENDED_NEW_GAME, skip_sid=sid)
            self._session = Session(host_id=host_id, quiz=quiz, host_sid=sid, created_at=self.clock())
            self.logger.info(f"[create] host={host_id} title={quiz.title!r} questions={len(quiz.questions)}")
            self._broadcast()
            return True

    def host_rejoin(self, sid, host_id: str) -> bool:
        with self._lock:
            session = self._session
            if session is None or not IdentityResolver(session).is_host_id(host_id):
                self.dispatcher.ended(ENDED_UNKNOWN_HOST, sid=sid)
                return False
            IdentityResolver(session).bind_host(sid)
            self._cancel_host_timer()
            self.logger.info(f"[host-rejoin] host={host_id}")
            self._broadcast()
            return True

    def player_join(self, sid, player_id: str, nickname: str) -> bool:
        with self._lock:
            session = self._require_session()
            resolver = IdentityResolver(session)
            existing = resolver.player_by_id(player_id)
            if existing is not None:
                # Same durable id joining again is a reconnect, not a new player
                return self._rebind_player(sid, existing)
            if session.state != GameState.LOBBY:
                raise GameError(GAME_STARTED)
            nickname = nickname.strip()
            if resolver.nickname_taken(nickname):
                raise GameError(NICKNAME_TAKEN)
            player = Player(id=player_id, nickname=nickname)
            session.players[player_id] = player
            resolver.bind_player(player, sid)
            self.logger.info(f"[join] player={player_id} nickname={nickname!r} players={len(session.players)}")
            self._broadcast()
            return True

    def player_rejoin(self, sid, player_id: str) -> bool:
        with self._lock:
            session = self._session
            player = IdentityResolver(session).player_by_id(player_id) if session else None
            if player is None:
                self.dispatcher.ended(ENDED_UNKNOWN_PLAYER, sid=sid)
                return False
            return self._rebind_player(sid, player)

    def start(self, sid) -> bool:
        with self._lock:
            session = self._require_session()
            if not self._is_host(session, sid) or session.state != GameState.LOBBY:
                return False
            if len(session.players) < self.min_players:
                noun = 'player' if self.min_players == 1 else 'players'
                raise GameError(f'At least {self.min_players} {noun} must join before starting.')
            self._open_question(session, 0)
            self.logger.info(f"[start] players={len(session.players)}")
            self._broadcast()
            return True

    def advance(self, sid) -> bool:
        with self._lock:
            session = self._require_session()
            if not self._is_host(session, sid):
                return False
            prev = session.state
            if session.state == GameState.QUESTION:
                session.state = GameState.REVEAL_ANSWER if self.reveal_step else GameState.LEADERBOARD
                session.question_started_at = None
                session.question_started_mono = None
            elif session.state == GameState.REVEAL_ANSWER:
                session.state = GameState.LEADERBOARD
            elif session.state == GameState.LEADERBOARD:
                if session.has_next_question():
                    self._open_question(session, session.current_question_index + 1)
                else:
                    session.state = GameState.FINISHED
            else:
                raise GameError(CANNOT_ADVANCE)
            self.logger.info(
                f"[next] {prev.value} -> {session.state.value} question={session.current_question_index}"
            )
            self._broadcast()
            return True

    def toggle_pause(self, sid) -> bool:
        with self._lock:
            session = self._require_session()
            if not self._is_host(session, sid):
                return False
            if session.state == GameState.PAUSED:
                resumed = session.paused_from
                if resumed == GameState.QUESTION:
                    # rebase both starts so the remaining time is unchanged
                    used_ms = session.current_question.time_limit_ms - session.remaining_ms_at_pause
                    session.question_started_at = self.clock() - used_ms
                    session.question_started_mono = self.monotonic() - used_ms
                session.state = resumed
                session.paused_from = None
                session.remaining_ms_at_pause = None
                self.logger.info(f"[resume] state={resumed.value}")
            elif session.state in PAUSABLE_STATES:
                if session.state == GameState.QUESTION:
                    elapsed = self.monotonic() - session.question_started_mono
                    limit_ms = session.current_question.time_limit_ms
                    session.remaining_ms_at_pause = max(0.0, limit_ms - elapsed)
                session.paused_from = session.state
                session.state = GameState.PAUSED
                self.logger.info(
                    f"[pause] from={session.paused_from.value} remaining_ms={session.remaining_ms_at_pause}"
                )
            else:
                return False
            self._broadcast()
            return True

    def answer(self, sid, player_id: str, answer_index: int) -> bool:
        with self._lock:
            session = self._require_session()
            if not IdentityResolver(session).is_player(player_id, sid):
                return False
            if session.state != GameState.QUESTION:
                return False
            player = session.players[player_id]
            question = session.current_question
            if player.answered:
                raise GameError(ALREADY_ANSWERED)
            if not question.is_valid_index(answer_index):
                raise GameError(INVALID_OPTION)

            player.answered = True
            player.answer_index = answer_index
            player.last_points = 0
            if question.options[answer_index].is_correct:
                elapsed_ms = self.monotonic() - session.question_started_mono
                first = session.first_correct_player_id is None
                if first:
                    session.first_correct_player_id = player.id
                points = self.rules.points_for(elapsed_ms, question.time_limit, first_correct=first)
                player.score += points
                player.last_points = points
            self.logger.info(
                f"[answer] player={player_id} question={session.current_question_index} "
                f"choice={answer_index} points={player.last_points} score={player.score}"
            )
            self._broadcast()
            return True

    # ---- connections ----

    def disconnect(self, sid) -> bool:
        with self._lock:
            session = self._session
            if session is None:
                return False
            changed = False
            if session.host_sid == sid:
                session.host_sid = None
                self._arm_host_timer(session)
                self.logger.info(f"[host-offline] host={session.host_id} timeout={self.host_timeout_sec}s")
                changed = True
            player = IdentityResolver(session).player_for_sid(sid)
            if player is not None:
                player.sid = None
                player.connected = False
                self.logger.info(f"[player-offline] player={player.id} nickname={player.nickname!r}")
                changed = True
            if changed:
                self._broadcast()
            return changed

    def expire_host(self, session: Session) -> bool:
        """Tear down ``session`` if it is still current and its host never came back."""
        with self._lock:
            if self._session is not session or session.host_connected:
                return False
            self._session = None
            self._timer = None
            self.logger.info(f"[host-timeout] host={session.host_id} session ended")
            self.dispatcher.ended(ENDED_HOST_INACTIVE)
            self._broadcast()
            return True

    # ---- helpers ----

    def _require_session(self) -> Session:
        if self._session is None:
            raise GameError(NO_GAME)
        return self._session

    @staticmethod
    def _is_host(session: Session, sid) -> bool:
        return IdentityResolver(session).is_host(sid)

    def _rebind_player(self, sid, player: Player) -> bool:
        IdentityResolver(self._session).bind_player(player, sid)
        self.logger.info(f"[player-rejoin] player={player.id} nickname={player.nickname!r} score={player.score}")
        self.dispatcher.send(sid, 'game:update', project_session(self._session))
        self._broadcast()
        return True

    def _open_question(self, session: Session, index: int) -> None:
        session.current_question_index = index
        session.state = GameState.QUESTION
        session.question_started_at = self.clock()
        session.question_started_mono = self.monotonic()
        session.first_correct_player_id = None
        for player in session.players.values():
            player.reset_answer()

    def _arm_host_timer(self, session: Session) -> None:
        self._cancel_host_timer()
        if self.timer_factory is None:
            return
        self._timer = self.timer_factory(self.host_timeout_sec, lambda: self.expire_host(session))
        self._timer.arm()

    def _cancel_host_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _broadcast(self) -> None:
        self.dispatcher.update(project_session(self._session))

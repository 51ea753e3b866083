from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class GameState(str, Enum):
    LOBBY = 'LOBBY'
    QUESTION = 'QUESTION'
    REVEAL_ANSWER = 'REVEAL_ANSWER'
    LEADERBOARD = 'LEADERBOARD'
    FINISHED = 'FINISHED'
    PAUSED = 'PAUSED'


# States in which currentQuestionIndex points at a live question
QUESTION_STATES = (GameState.QUESTION, GameState.REVEAL_ANSWER, GameState.LEADERBOARD)
PAUSABLE_STATES = (GameState.LOBBY, GameState.QUESTION, GameState.LEADERBOARD)


@dataclass(frozen=True)
class Option:
    text: str
    is_correct: bool = False

    def to_dict(self, redact=False):
        if redact:
            return {'text': self.text}
        return {'text': self.text, 'isCorrect': self.is_correct}


@dataclass(frozen=True)
class Question:
    text: str
    time_limit: int
    options: Tuple[Option, ...]

    @property
    def time_limit_ms(self) -> int:
        return self.time_limit * 1000

    def is_valid_index(self, index) -> bool:
        return isinstance(index, int) and 0 <= index < len(self.options)

    def to_dict(self, redact=False):
        return {
            'text': self.text,
            'timeLimit': self.time_limit,
            'options': [o.to_dict(redact=redact) for o in self.options],
        }


@dataclass(frozen=True)
class Quiz:
    title: str
    questions: Tuple[Question, ...]

    def to_dict(self, redact=False):
        return {
            'title': self.title,
            'questions': [q.to_dict(redact=redact) for q in self.questions],
        }


@dataclass
class Player:
    id: str
    nickname: str
    sid: Optional[str] = None
    score: int = 0
    answered: bool = False
    answer_index: Optional[int] = None
    last_points: int = 0
    connected: bool = True

    def reset_answer(self) -> None:
        self.answered = False
        self.answer_index = None
        self.last_points = 0

    def to_dict(self):
        return {
            'id': self.id,
            'nickname': self.nickname,
            'score': self.score,
            'answered': self.answered,
            'answerIndex': self.answer_index,
            'lastPoints': self.last_points,
            'connected': self.connected,
        }


@dataclass
class Session:
    host_id: str
    quiz: Quiz
    host_sid: Optional[str] = None
    state: GameState = GameState.LOBBY
    current_question_index: int = 0
    question_started_at: Optional[float] = None
    # monotonic ms twin of question_started_at, used for elapsed-time math only
    question_started_mono: Optional[float] = None
    players: Dict[str, Player] = field(default_factory=dict)
    paused_from: Optional[GameState] = None
    remaining_ms_at_pause: Optional[float] = None
    first_correct_player_id: Optional[str] = None
    created_at: Optional[float] = None

    @property
    def current_question(self) -> Question:
        return self.quiz.questions[self.current_question_index]

    @property
    def host_connected(self) -> bool:
        return self.host_sid is not None

    def has_next_question(self) -> bool:
        return self.current_question_index < len(self.quiz.questions) - 1

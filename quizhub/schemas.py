"""Boundary schemas for inbound Socket.IO events.

Every client event is parsed into one variant of the ``Command`` tagged union
before it reaches the engine, so handlers never look inside raw dicts.
"""
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, TypeAdapter, ValidationError, field_validator

from .errors import InvalidPayload
from .models import Option, Question, Quiz

MIN_OPTIONS = 2
MAX_OPTIONS = 4

Identifier = Annotated[str, Field(min_length=1, max_length=128)]


class _Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, extra='ignore')


class OptionData(_Payload):
    text: str = Field(min_length=1)
    is_correct: StrictBool = Field(default=False, alias='isCorrect')


class QuestionData(_Payload):
    text: str = Field(min_length=1)
    time_limit: StrictInt = Field(alias='timeLimit', gt=0)
    options: List[OptionData] = Field(min_length=MIN_OPTIONS, max_length=MAX_OPTIONS)

    @field_validator('options')
    @classmethod
    def needs_a_correct_option(cls, options):
        if not any(o.is_correct for o in options):
            raise ValueError('at least one option must be correct')
        return options


class QuizData(_Payload):
    title: str = ''
    questions: List[QuestionData] = Field(min_length=1)

    def to_quiz(self) -> Quiz:
        return Quiz(
            title=self.title,
            questions=tuple(
                Question(
                    text=q.text,
                    time_limit=q.time_limit,
                    options=tuple(Option(text=o.text, is_correct=o.is_correct) for o in q.options),
                )
                for q in self.questions
            ),
        )


class GetState(_Payload):
    event: Literal['get-state']


class HostCreate(_Payload):
    event: Literal['host:create']
    quiz_data: QuizData = Field(alias='quizData')
    host_id: Identifier = Field(alias='hostId')


class HostRejoin(_Payload):
    event: Literal['host:rejoin']
    host_id: Identifier = Field(alias='hostId')


class HostTogglePause(_Payload):
    event: Literal['host:toggle-pause']


class PlayerJoin(_Payload):
    event: Literal['player:join']
    nickname: str = Field(min_length=1, max_length=32)
    player_id: Identifier = Field(alias='playerId')


class PlayerRejoin(_Payload):
    event: Literal['player:rejoin']
    player_id: Identifier = Field(alias='playerId')


class GameStart(_Payload):
    event: Literal['game:start']


class PlayerAnswer(_Payload):
    event: Literal['player:answer']
    player_id: Identifier = Field(alias='playerId')
    answer_index: StrictInt = Field(alias='answerIndex')


class GameNext(_Payload):
    event: Literal['game:next']


Command = Annotated[
    Union[GetState, HostCreate, HostRejoin, HostTogglePause, PlayerJoin,
          PlayerRejoin, GameStart, PlayerAnswer, GameNext],
    Field(discriminator='event'),
]

_command_adapter = TypeAdapter(Command)

# Older clients send 'game:get-state'
EVENT_ALIASES = {'game:get-state': 'get-state'}


def parse_command(event, data=None):
    """Validate raw event data and return the matching command model.

    Raises InvalidPayload when the data does not fit the event's schema.
    """
    event = EVENT_ALIASES.get(event, event)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidPayload(event, ['payload must be an object'])
    try:
        return _command_adapter.validate_python({**data, 'event': event})
    except ValidationError as exc:
        raise InvalidPayload(event, [e['msg'] for e in exc.errors()]) from exc


def parse_quiz(data) -> Quiz:
    """Validate a quiz document (as sent in host:create) and build the Quiz model."""
    try:
        return QuizData.model_validate(data).to_quiz()
    except ValidationError as exc:
        raise InvalidPayload('quiz', [e['msg'] for e in exc.errors()]) from exc

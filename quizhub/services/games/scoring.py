from dataclasses import dataclass

MAX_POINTS = 1000


def award(time_taken_sec: float, time_limit_sec: float, factor: float = 2.0) -> int:
    """Points for a correct answer given after ``time_taken_sec``.

    Decays linearly from MAX_POINTS at 0s to 0 at ``time_limit_sec * factor``.
    """
    if time_limit_sec <= 0:
        raise ValueError('time_limit_sec must be positive')
    if factor <= 1:
        raise ValueError('factor must be greater than 1')
    elapsed = max(0.0, float(time_taken_sec))
    return int(round(max(0.0, MAX_POINTS * (1 - elapsed / (time_limit_sec * factor)))))


@dataclass(frozen=True)
class ScoringRules:
    """Per-deployment scoring knobs (see SCORE_DECAY_FACTOR / FIRST_CORRECT_BONUS)."""

    factor: float = 2.0
    first_correct_bonus: int = 0

    def __post_init__(self):
        if self.factor <= 1:
            raise ValueError('factor must be greater than 1')
        if self.first_correct_bonus < 0:
            raise ValueError('first_correct_bonus must not be negative')

    @classmethod
    def from_config(cls, config) -> 'ScoringRules':
        return cls(
            factor=float(config.get('SCORE_DECAY_FACTOR', 2.0)),
            first_correct_bonus=int(config.get('FIRST_CORRECT_BONUS', 0)),
        )

    def points_for(self, elapsed_ms: float, time_limit_sec: int, first_correct: bool = False) -> int:
        points = award(elapsed_ms / 1000.0, time_limit_sec, self.factor)
        if first_correct:
            points += self.first_correct_bonus
        return points

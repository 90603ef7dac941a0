"""Rock Paper Scissors — against a fair pick from the stream."""
from fractions import Fraction

from config.errors import InvalidGameParameterError
from config.game_schema import RpsParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult

CHOICES = ("rock", "paper", "scissors")
BEATS = {"rock": "scissors", "paper": "rock", "scissors": "paper"}


class RpsCalculator(BaseOutcomeCalculator):
    game_type = "rps"
    display_name = "Rock Paper Scissors"
    params_model = RpsParams

    def draw(self, source, params) -> int:
        return source.next_int(len(CHOICES))

    def resolve(self, bet: int, params: RpsParams, pick) -> GameResult:
        self.validate(params)
        if isinstance(pick, bool) or not isinstance(pick, int) or not 0 <= pick < len(CHOICES):
            raise InvalidGameParameterError(f"Computer pick must be 0-{len(CHOICES) - 1}: {pick!r}")
        computer = CHOICES[pick]
        if params.choice == computer:
            outcome, m = "tie", Fraction(1)
        elif BEATS[params.choice] == computer:
            outcome, m = "win", 3 * self.house_return
        else:
            outcome, m = "lose", Fraction(0)
        return self._result(
            bet, outcome == "win", m,
            choice=params.choice, computer_choice=computer, outcome=outcome,
        )

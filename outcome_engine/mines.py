"""Mines — 5x5 board, 1.15x per gem revealed."""
from fractions import Fraction

from config.errors import InvalidGameParameterError
from config.game_schema import GRID_SIZE, MAX_MINES, MIN_MINES, MinesParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult, display_number
from tools.fair_rng import SecureSource

GEM_MULTIPLIER = Fraction("1.15")


def _check_mine_count(mine_count: int) -> None:
    if isinstance(mine_count, bool) or not isinstance(mine_count, int) \
            or not MIN_MINES <= mine_count <= MAX_MINES:
        raise InvalidGameParameterError(
            f"Mine count must be between {MIN_MINES} and {MAX_MINES}: {mine_count!r}",
            mine_count=repr(mine_count))


def generate_mine_positions(mine_count: int, source=None) -> list[int]:
    """Draw `mine_count` distinct tiles without replacement, returned sorted."""
    _check_mine_count(mine_count)
    source = source or SecureSource()
    available = list(range(GRID_SIZE))
    mines = []
    for _ in range(mine_count):
        mines.append(available.pop(source.next_int(len(available))))
    return sorted(mines)


class MinesCalculator(BaseOutcomeCalculator):
    game_type = "mines"
    display_name = "Mines"
    params_model = MinesParams

    def multiplier(self, gems_revealed: int) -> Fraction:
        if gems_revealed < 0 or gems_revealed > GRID_SIZE - MIN_MINES:
            raise InvalidGameParameterError(f"Gems revealed out of range: {gems_revealed}")
        return GEM_MULTIPLIER ** gems_revealed * self.house_return

    def settle(self, bet: int, gems_revealed: int, hit_mine: bool) -> GameResult:
        """Cash-out settlement for a board played move by move."""
        win = not hit_mine and gems_revealed > 0
        return self._result(
            bet, win, self.multiplier(gems_revealed) if win else 0,
            gems_revealed=gems_revealed, hit_mine=hit_mine,
        )

    def draw(self, source, params) -> list[int]:
        return generate_mine_positions(params.mine_count, source)

    def resolve(self, bet: int, params: MinesParams, mines) -> GameResult:
        self.validate(params)
        mine_set = set(mines)
        if len(mine_set) != params.mine_count or any(m < 0 or m >= GRID_SIZE for m in mine_set):
            raise InvalidGameParameterError(
                f"Board must hold {params.mine_count} distinct mines on tiles 0-{GRID_SIZE - 1}")

        gems = 0
        hit = None
        for tile in params.picks:
            if tile in mine_set:
                hit = tile
                break
            gems += 1

        win = hit is None and gems > 0
        potential = self.multiplier(gems)
        return self._result(
            bet, win, potential if win else 0,
            mine_count=params.mine_count,
            mine_positions=sorted(mine_set),
            picks=list(params.picks),
            gems_revealed=gems,
            hit_mine=hit is not None,
            mine_hit_at=hit,
            cashout_multiplier=display_number(potential, 4),
        )

# oracle/core/solver.py
import logging
from typing import Optional, Union

from .constants import WIDTH, MAX_MOVES, MAX_SCORE
from .enums import Outcome, SolveMode
from .errors import PreconditionError
from .move_sorter import MoveSorter
from .position import BoardPosition, column_mask
from .schemas import Analysis
from .settings import SolverSettings, get_settings

logger = logging.getLogger(__name__)


class Solver:
    """
    Exact Connect 4 solver: negamax with alpha-beta pruning.

    Score convention, from the side to move:
      - positive: win, the faster the win the higher the score
      - 0: draw
      - negative: loss, the later the loss the closer to 0
    A win with the winner's k-th stone scores MAX_SCORE + 1 - k.
    """

    def __init__(self, settings: Optional[SolverSettings] = None):
        self.settings = settings or get_settings()
        self.move_ordering = self.settings.move_ordering
        self.column_order = list(self.settings.column_order)
        # Diagnostics only, never reset by solve()
        self.node_count = 0

    def reset(self):
        self.node_count = 0

    def solve(self, position: BoardPosition, mode: Union[SolveMode, str, bool, None] = None) -> int:
        """
        Root Entry Point.
        STRONG returns the exact score; WEAK only its sign (-1, 0 or 1),
        searched with the much narrower [-1, 1] window.
        """
        mode = self._resolve_mode(mode)

        # negamax would catch it too, but the score window below assumes no immediate win
        if position.can_win_next():
            score = (MAX_MOVES + 1 - position.nb_moves()) // 2
            logger.debug("Immediate win after %d moves: %d", position.nb_moves(), score)
            return 1 if mode is SolveMode.WEAK else score

        if mode is SolveMode.WEAK:
            alpha, beta = -1, 1
        else:
            alpha = -((MAX_MOVES - position.nb_moves()) // 2)
            beta = (MAX_MOVES + 1 - position.nb_moves()) // 2

        start_nodes = self.node_count
        score = self.negamax(position, alpha, beta)
        if mode is SolveMode.WEAK:
            # Fail-soft bounds keep the sign exact within [-1, 1]
            score = (score > 0) - (score < 0)

        logger.debug(
            "Solved %r in %s mode, window [%d, %d]: score=%d nodes=%d",
            position, mode, alpha, beta, score, self.node_count - start_nodes,
        )
        return score

    def negamax(self, position: BoardPosition, alpha: int, beta: int) -> int:
        """
        Scores a position within the window [alpha, beta] (alpha < beta).

        Returns:
          - the exact score when it lies within the window
          - an upper bound <= alpha when the score is <= alpha
          - a lower bound >= beta when the score is >= beta
        """
        moves = position.nb_moves()

        # 1. Current player wins next move
        if position.can_win_next():
            return (MAX_MOVES + 1 - moves) // 2

        if alpha >= beta:
            raise PreconditionError(
                "Search window is empty", context={"alpha": alpha, "beta": beta}
            )

        self.node_count += 1

        # 2. Every move lets the opponent win on the next ply
        next_moves = position.possible_non_losing_moves()
        if next_moves == 0:
            return -((MAX_MOVES - moves) // 2)

        # 3. Check Draw: two plies left and nobody can align
        if moves >= MAX_MOVES - 2:
            return 0

        # 4. Opponent cannot win on its next ply: lower bound of our score
        lower = -((MAX_MOVES - 2 - moves) // 2)
        if alpha < lower:
            alpha = lower
            if alpha >= beta:
                return alpha

        # We cannot win on this ply: upper bound of our score
        upper = (MAX_MOVES - 1 - moves) // 2
        if beta > upper:
            beta = upper
            if alpha >= beta:
                return beta

        # 5. Recursive Search
        if self.move_ordering:
            candidates = self._ordered_moves(position, next_moves)
        else:
            candidates = self._column_moves(position)

        for move in candidates:
            next_position = position.copy()
            next_position.play_move(move)
            # Opponent's view: window [-beta, -alpha]
            score = -self.negamax(next_position, -beta, -alpha)

            if score >= beta:
                return score  # Beta Cutoff
            if score > alpha:
                alpha = score

        return alpha

    def analyze(self, position: BoardPosition, mode: Union[SolveMode, str, bool, None] = None) -> Analysis:
        """
        Evaluates EVERY column of the position.
        Each playable column gets the score of the side to move after playing it.
        """
        mode = self._resolve_mode(mode)
        start_nodes = self.node_count
        scores = {}
        best_score = None
        best_move = -1

        for col in range(WIDTH):
            if not position.can_play(col):
                scores[col] = None
                continue
            if position.is_winning_move(col):
                score = (MAX_MOVES + 1 - position.nb_moves()) // 2
                if mode is SolveMode.WEAK:
                    score = 1
            else:
                next_position = position.copy()
                next_position.play_column(col)
                score = -self.solve(next_position, mode)
            scores[col] = score
            if best_score is None or score > best_score:
                best_score = score
                best_move = col

        if best_score is None:
            raise PreconditionError("No playable column left", context={"moves": position.nb_moves()})

        outcome, distance = self._analyze_score(best_score, position.nb_moves(), mode)
        logger.debug("Analysis of %r: best_move=%d best_score=%d", position, best_move, best_score)

        return Analysis(
            mode=mode,
            scores=scores,
            best_move=best_move,
            best_score=best_score,
            outcome=outcome,
            distance_to_outcome=distance,
            nodes_explored=self.node_count - start_nodes,
        )

    def _column_moves(self, position: BoardPosition):
        """Every playable column, left to right, as move bitmaps."""
        possible = position.possible()
        for col in range(WIDTH):
            if position.can_play(col):
                yield possible & column_mask(col)

    def _ordered_moves(self, position: BoardPosition, next_moves: int):
        """Non-losing moves, best move_score first, centre first on ties."""
        sorter = MoveSorter()
        for col in reversed(self.column_order):
            move = next_moves & column_mask(col)
            if move:
                sorter.add(move, position.move_score(move))
        while move := sorter.get_next():
            yield move

    def _resolve_mode(self, mode) -> SolveMode:
        if mode is None:
            return self.settings.default_mode
        if isinstance(mode, bool):
            return SolveMode.WEAK if mode else SolveMode.STRONG
        return SolveMode(mode)

    def _analyze_score(self, score: int, moves: int, mode: SolveMode):
        if score == 0:
            return Outcome.DRAW, 0
        outcome = Outcome.WIN if score > 0 else Outcome.LOSS
        if mode is SolveMode.WEAK:
            return outcome, 0
        own_stones = moves // 2
        opponent_stones = moves - own_stones
        if score > 0:
            # Winner is the side to move, aligning with its k-th stone
            stones = MAX_SCORE + 1 - score
            return outcome, 2 * (stones - own_stones) - 1
        stones = MAX_SCORE + 1 + score
        return outcome, 2 * (stones - opponent_stones)

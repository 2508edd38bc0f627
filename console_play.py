import argparse
import logging
import sys
from typing import Callable, List, Optional

from oracle.core.constants import WIDTH, MAX_MOVES
from oracle.core.display import render_board
from oracle.core.enums import SolveMode
from oracle.core.errors import InvalidSequenceError
from oracle.core.position import BoardPosition
from oracle.core.settings import get_settings
from oracle.core.solver import Solver

logger = logging.getLogger(__name__)


def solve_sequence(seq: str, mode: Optional[SolveMode] = None, solver: Optional[Solver] = None) -> int:
    """Replays a 1-based column sequence and returns the solver score."""
    position = BoardPosition()
    played = position.play(seq)
    if played != len(seq):
        raise InvalidSequenceError(seq, played)
    solver = solver or Solver()
    return solver.solve(position, mode)


def human_vs_human(
    position: BoardPosition,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> int:
    """
    Two players alternate typing a column (1..WIDTH) until someone aligns four
    or the board is full.
    Returns the winning player (1 or 2) or 0 for a draw or closed input.
    """
    write(render_board(position))
    while True:
        player = position.player_to_move()
        try:
            line = read_line(f"Player {player}, your move (1-{WIDTH}): ")
        except EOFError:
            return 0

        line = line.strip()
        if len(line) != 1 or not ('0' <= line <= '9'):
            write(f"Invalid input: must be a single digit from 1 to {WIDTH}")
            continue
        col = int(line) - 1
        if not 0 <= col < WIDTH or not position.can_play(col):
            write(f"Invalid move: column {line} cannot be played")
            continue

        won = position.is_winning_move(col)
        position.play_column(col)
        write(render_board(position))

        if won:
            write(f"Player {player} wins!")
            return player
        if position.nb_moves() == MAX_MOVES:
            write("Game is a draw.")
            return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    parser = argparse.ArgumentParser(description="Connect 4 solver console")
    parser.add_argument("--solve", metavar="SEQ", help="1-based column sequence to solve")
    parser.add_argument("--weak", action="store_true", help="only compute win/draw/loss")
    args = parser.parse_args(argv)

    if args.solve is None:
        print("=======================================")
        print("   CONNECT FOUR: Human vs Human")
        print("=======================================")
        human_vs_human(BoardPosition(), read_line=input)
        return 0

    mode = SolveMode.WEAK if args.weak else settings.default_mode
    solver = Solver(settings)
    try:
        score = solve_sequence(args.solve, mode, solver)
    except InvalidSequenceError as exc:
        print(f"Invalid sequence: {exc}", file=sys.stderr)
        return 1

    print(score)
    logger.info("Explored %d nodes", solver.node_count)
    return 0


if __name__ == "__main__":
    sys.exit(main())

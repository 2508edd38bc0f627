# oracle/core/display.py
from typing import Optional

from .constants import WIDTH, HEIGHT
from .errors import PreconditionError
from .position import BoardPosition, cell_bit

SYMBOLS = {0: ".", 1: "X", 2: "O"}


def render_board(position: BoardPosition, current_player: Optional[int] = None) -> str:
    """
    ASCII grid of the position, top row first, columns numbered 1..WIDTH.
    current_player says which absolute player (1 = X, 2 = O) owns
    current_position; it defaults to the player whose turn it is.
    """
    if current_player is None:
        current_player = position.player_to_move()
    if current_player not in (1, 2):
        raise PreconditionError("Current player must be 1 or 2", context={"player": current_player})

    current_symbol = SYMBOLS[current_player]
    opponent_symbol = SYMBOLS[3 - current_player]
    opponent_position = position.current_position ^ position.mask

    header = " " + " ".join(str(c + 1) for c in range(WIDTH))
    rows_str = []
    for row in range(HEIGHT - 1, -1, -1):
        row_cells = []
        for col in range(WIDTH):
            bit = cell_bit(col, row)
            if position.current_position & bit:
                row_cells.append(current_symbol)
            elif opponent_position & bit:
                row_cells.append(opponent_symbol)
            else:
                row_cells.append(SYMBOLS[0])
        rows_str.append("|" + "|".join(row_cells) + "|")
    return header + "\n" + "\n".join(rows_str)


def render_bitmask(bits: int) -> str:
    """Raw bitmap dump including the guard row, for debugging."""
    rows_str = []
    for row in range(HEIGHT, -1, -1):
        rows_str.append(" ".join("X" if bits & cell_bit(col, row) else "-" for col in range(WIDTH)))
    return "\n".join(rows_str)

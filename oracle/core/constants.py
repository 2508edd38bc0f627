# oracle/core/constants.py

# --- Board Dimensions ---
WIDTH = 7
HEIGHT = 6
# Each column is stored on HEIGHT + 1 bits; the extra bit is a guard row
# that absorbs the carry of the column search trick.
COLUMN_BITS = HEIGHT + 1
MAX_MOVES = WIDTH * HEIGHT


def _bottom(width: int, height: int) -> int:
    """One bit on the bottom cell of every column."""
    mask = 0
    for col in range(width):
        mask |= 1 << col * (height + 1)
    return mask


BOTTOM_MASK = _bottom(WIDTH, HEIGHT)
# All playable cells, guard row excluded
BOARD_MASK = BOTTOM_MASK * ((1 << HEIGHT) - 1)

# --- Scoring System ---
# Score = number of stones the winner still had in hand when aligning four.
# Win on the last ply of the first player = +1, immediate win on an empty
# board = +21, draw = 0.
MAX_SCORE = (MAX_MOVES + 1) // 2
MIN_SCORE = -(MAX_MOVES // 2)

# --- Optimization ---
# Centre columns first when move ordering is enabled
COLUMN_ORDER = [3, 2, 4, 1, 5, 0, 6]

# oracle/core/position.py
from typing import List

from .constants import WIDTH, HEIGHT, COLUMN_BITS, BOTTOM_MASK, BOARD_MASK
from .errors import InvalidPositionError, PreconditionError


def top_mask_col(col: int) -> int:
    """Single bit on the top playable cell of a column."""
    return 1 << ((HEIGHT - 1) + col * COLUMN_BITS)


def bottom_mask_col(col: int) -> int:
    """Single bit on the bottom cell of a column."""
    return 1 << (col * COLUMN_BITS)


def column_mask(col: int) -> int:
    """All playable cells of a column."""
    return ((1 << HEIGHT) - 1) << (col * COLUMN_BITS)


def cell_bit(col: int, row: int) -> int:
    """Bit of cell (col, row), row 0 being the bottom."""
    return 1 << (row + col * COLUMN_BITS)


class BoardPosition:
    """
    A Connect 4 position, seen from the player whose turn it is.

    Bit order for the 7x6 board (the top row of numbers is the guard row,
    always empty):

        6 13 20 27 34 41 48
        5 12 19 26 33 40 47
        4 11 18 25 32 39 46
        3 10 17 24 31 38 45
        2  9 16 23 30 37 44
        1  8 15 22 29 36 43
        0  7 14 21 28 35 42

    - current_position: stones of the player to move
    - mask: every stone on the board
    - moves: plies played since the empty board

    Positions that already contain an alignment are not supported.
    """

    __slots__ = ("current_position", "mask", "moves")

    def __init__(self, current_position: int = 0, mask: int = 0, moves: int = 0):
        self.current_position = current_position
        self.mask = mask
        self.moves = moves

    @classmethod
    def from_matrix(cls, matrix: List[List[int]]) -> 'BoardPosition':
        """
        Converts a 2D matrix (Row 0=Top, 0=Empty, 1=First player, 2=Second player)
        to a BoardPosition (Row 0=Bottom).
        Whose turn it is follows from the piece count.
        """
        if len(matrix) != HEIGHT or any(len(row) != WIDTH for row in matrix):
            raise InvalidPositionError(
                f"Matrix must be {HEIGHT}x{WIDTH}",
                context={"rows": len(matrix)},
            )

        mask = 0
        p1_pieces = 0
        p1_count = p2_count = 0

        for c in range(WIDTH):
            seen_empty = False
            # Scan from Bottom (last matrix row) to Top
            for r in range(HEIGHT - 1, -1, -1):
                val = matrix[r][c]
                if val == 0:
                    seen_empty = True
                    continue
                if val not in (1, 2):
                    raise InvalidPositionError(
                        f"Unknown cell value {val!r}", context={"row": r, "col": c}
                    )
                if seen_empty:
                    raise InvalidPositionError(
                        "Floating piece above an empty cell", context={"row": r, "col": c}
                    )
                bit = cell_bit(c, (HEIGHT - 1) - r)
                mask |= bit
                if val == 1:
                    p1_pieces |= bit
                    p1_count += 1
                else:
                    p2_count += 1

        # First player moves first: either both have the same count or P1 is one ahead
        if p1_count - p2_count not in (0, 1):
            raise InvalidPositionError(
                "Piece counts cannot come from alternating play",
                context={"p1": p1_count, "p2": p2_count},
            )

        p2_pieces = mask ^ p1_pieces
        if cls.has_alignment(p1_pieces) or cls.has_alignment(p2_pieces):
            raise InvalidPositionError("Position already contains an alignment")

        moves = p1_count + p2_count
        # current_position is always the player to move
        current = p1_pieces if moves % 2 == 0 else p2_pieces
        return cls(current, mask, moves)

    def copy(self) -> 'BoardPosition':
        return BoardPosition(self.current_position, self.mask, self.moves)

    # --- Moves ---

    def play_move(self, move: int) -> None:
        """
        Plays a move given as a single-bit bitmap of a playable cell.
        The previous player's stones become mask ^ current (role swap).
        """
        self.current_position ^= self.mask
        self.mask |= move
        self.moves += 1

    def play_column(self, col: int) -> None:
        """
        Drops a stone of the current player in a playable column.
        Must not be used for a move that aligns four.
        """
        if not self.can_play(col):
            raise PreconditionError(f"Column {col} is full", context={"col": col})
        self.play_move((self.mask + bottom_mask_col(col)) & column_mask(col))

    def play(self, seq: str) -> int:
        """
        Plays a sequence of 1-based column digits, mainly to set up a position.

        Stops at the first invalid move:
          - a character that is not a digit in 1..WIDTH
          - a full column
          - a move that aligns four (only non-terminal positions are solved)

        Returns the number of moves played; the sequence was valid iff it
        equals len(seq).
        """
        for i, char in enumerate(seq):
            if not ('1' <= char <= '9'):
                return i
            col = int(char) - 1
            if col >= WIDTH or not self.can_play(col) or self.is_winning_move(col):
                return i
            self.play_column(col)
        return len(seq)

    # --- Queries ---

    def can_play(self, col: int) -> bool:
        """Checks if the top cell of the column is empty."""
        _check_column(col)
        return (self.mask & top_mask_col(col)) == 0

    def is_winning_move(self, col: int) -> bool:
        """
        True if the current player aligns four by playing col.
        Must only be called on a playable column.
        """
        if not self.can_play(col):
            raise PreconditionError(f"Column {col} is full", context={"col": col})
        return bool(self.winning_position() & self.possible() & column_mask(col))

    def can_win_next(self) -> bool:
        """True if the current player has a winning move available."""
        return bool(self.winning_position() & self.possible())

    def nb_moves(self) -> int:
        return self.moves

    def key(self) -> int:
        """Unique ID for caching: current_position + mask"""
        return self.current_position + self.mask

    def player_to_move(self) -> int:
        """1 for the first player, 2 for the second one."""
        return 1 if self.moves % 2 == 0 else 2

    def cell(self, col: int, row: int) -> int:
        """Owner of a cell in absolute numbering: 0 empty, 1 or 2."""
        bit = cell_bit(col, row)
        if not self.mask & bit:
            return 0
        current = self.player_to_move()
        return current if self.current_position & bit else 3 - current

    def possible(self) -> int:
        """
        Bitmap of the cells where a stone can be dropped, one per non-full column.
        Adding the bottom row to the mask carries each column's stack one cell up.
        """
        return (self.mask + BOTTOM_MASK) & BOARD_MASK

    def winning_position(self) -> int:
        """Empty cells that would align four for the current player."""
        return self.compute_winning_position(self.current_position, self.mask)

    def opponent_winning_position(self) -> int:
        """Empty cells that would align four for the opponent."""
        return self.compute_winning_position(self.current_position ^ self.mask, self.mask)

    def possible_non_losing_moves(self) -> int:
        """
        Bitmap of the playable cells that do not let the opponent win on the
        next ply. Empty when the opponent has two threats we cannot both block.

        Intended for positions where the current player cannot win directly:
        it would rather block than take a win.
        """
        if self.can_win_next():
            raise PreconditionError("Current player can win next move")
        possible_mask = self.possible()
        opponent_win = self.opponent_winning_position()
        forced_moves = possible_mask & opponent_win
        if forced_moves:
            if forced_moves & (forced_moves - 1):
                # More than one forced move: the opponent cannot be stopped
                return 0
            possible_mask = forced_moves
        # Avoid playing just below an opponent winning spot
        return possible_mask & ~(opponent_win >> 1)

    def move_score(self, move: int) -> int:
        """Number of winning spots the current player has after playing move."""
        return self.compute_winning_position(self.current_position | move, self.mask).bit_count()

    @staticmethod
    def compute_winning_position(position: int, mask: int) -> int:
        """
        position: stones of the player to evaluate
        mask: every stone on the board

        Returns the empty cells that would complete an alignment of four.
        """
        # Vertical
        r = (position << 1) & (position << 2) & (position << 3)

        # Horizontal, diagonal / and diagonal \ share the same pattern
        for shift in (COLUMN_BITS, HEIGHT, HEIGHT + 2):
            p = (position << shift) & (position << 2 * shift)
            r |= p & (position << 3 * shift)
            r |= p & (position >> shift)
            p = (position >> shift) & (position >> 2 * shift)
            r |= p & (position << shift)
            r |= p & (position >> 3 * shift)

        return r & (BOARD_MASK ^ mask)

    @staticmethod
    def has_alignment(p: int) -> bool:
        """Checks if the bitmap already holds four connected stones."""
        # Horizontal
        m = p & (p >> COLUMN_BITS)
        if m & (m >> (2 * COLUMN_BITS)): return True
        # Diagonal \
        m = p & (p >> HEIGHT)
        if m & (m >> (2 * HEIGHT)): return True
        # Diagonal /
        m = p & (p >> (HEIGHT + 2))
        if m & (m >> (2 * (HEIGHT + 2))): return True
        # Vertical
        m = p & (p >> 1)
        if m & (m >> 2): return True
        return False

    # --- Value semantics ---

    def __eq__(self, other):
        if not isinstance(other, BoardPosition):
            return NotImplemented
        return (self.current_position, self.mask, self.moves) == (
            other.current_position, other.mask, other.moves
        )

    def __hash__(self):
        return hash((self.current_position, self.mask, self.moves))

    def __repr__(self):
        return (
            f"BoardPosition(current_position={self.current_position:#x}, "
            f"mask={self.mask:#x}, moves={self.moves})"
        )


def _check_column(col: int) -> None:
    if not 0 <= col < WIDTH:
        raise PreconditionError(f"Column {col} is outside the board", context={"col": col})

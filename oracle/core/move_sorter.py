# oracle/core/move_sorter.py
from .constants import WIDTH
from .errors import PreconditionError

class MoveSorter:
    """
    Holds up to WIDTH candidate moves kept sorted by score.
    get_next() pops the best one; among equal scores the move added last wins.
    """
    def __init__(self):
        self.entries = []  # (move, score), ascending by score

    def add(self, move: int, score: int):
        if len(self.entries) >= WIDTH:
            raise PreconditionError("MoveSorter holds at most one move per column")
        pos = len(self.entries)
        # Insert after entries of equal score so the latest one pops first
        while pos > 0 and self.entries[pos - 1][1] > score:
            pos -= 1
        self.entries.insert(pos, (move, score))

    def get_next(self) -> int:
        """Best remaining move, or 0 when empty."""
        if not self.entries:
            return 0
        return self.entries.pop()[0]

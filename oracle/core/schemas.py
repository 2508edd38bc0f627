from pydantic import BaseModel, ConfigDict
from typing import Dict, Optional

from .enums import Outcome, SolveMode

class Analysis(BaseModel):
    """Root evaluation of every column of a position."""
    model_config = ConfigDict(frozen=True)

    mode: SolveMode
    # Score of playing each 0-based column, None when the column is full
    scores: Dict[int, Optional[int]]
    best_move: int
    best_score: int
    outcome: Outcome
    # Plies until the outcome under optimal play (0 for a draw or in weak mode)
    distance_to_outcome: int
    nodes_explored: int

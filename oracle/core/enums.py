from enum import StrEnum

class SolveMode(StrEnum):
    STRONG = "strong"
    WEAK = "weak"

class Outcome(StrEnum):
    WIN = "WIN"
    DRAW = "DRAW"
    LOSS = "LOSS"

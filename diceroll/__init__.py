from diceroll.roll import (
    DiceLimitExceeded,
    DiceRollError,
    DivisionByZero,
    EvalError,
    ExplosionLimitExceeded,
    NegativeDiceCount,
    ParseError,
    RollResult,
    ZeroSidedDie,
    evaluate,
)
from diceroll.roll_parser import parse, parse_all

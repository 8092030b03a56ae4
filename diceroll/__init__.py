import typing

from diceroll.errors import (
    ArithmeticOverflow,
    CompoundLimitExceeded,
    ConfigError,
    DiceRollError,
    ExplosionLimitExceeded,
    InvalidComparisonToken,
    ParseError,
    ReRollLimitExceeded,
)
from diceroll.tree import Comparison, Expression, ResultTree, debug
from diceroll.roll_parser import RegexDice, parse, valid_expression
from diceroll.visitor import DiceRollingVisitor, RandomSource


def detailed_roll(
    expression: str, random_source: typing.Optional[RandomSource] = None
) -> ResultTree:
    return DiceRollingVisitor(random_source).visit(parse(expression))


def roll(expression: str, random_source: typing.Optional[RandomSource] = None) -> int:
    return detailed_roll(expression, random_source).value


__all__ = [
    "ArithmeticOverflow",
    "Comparison",
    "CompoundLimitExceeded",
    "ConfigError",
    "DiceRollError",
    "DiceRollingVisitor",
    "ExplosionLimitExceeded",
    "Expression",
    "InvalidComparisonToken",
    "ParseError",
    "RandomSource",
    "ReRollLimitExceeded",
    "RegexDice",
    "ResultTree",
    "debug",
    "detailed_roll",
    "parse",
    "roll",
    "valid_expression",
]

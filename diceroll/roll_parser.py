"""Turns dice notation into :mod:`diceroll.tree` expression trees.

The grammar is an ordered list of whole-string regular expressions. The first
pattern that matches the entire (trimmed) text wins and its builder turns the
captured groups into a node, parsing sub-expressions recursively. The order of
:attr:`RegexDice.rules` is part of the grammar: dice-specific patterns come
before the generic operator patterns that would also match them, and the
binary operators are tried lowest precedence first.

Operator patterns capture their left operand greedily, so a chain like
``5-2-1`` is split at the last ``-``.
"""
import logging
import re
import typing

import diceroll.tree as tree
from diceroll.config import Settings
from diceroll.errors import ParseError

logger = logging.getLogger(__name__)

_COUNT = r"(?P<count>[0-9]*)"
_N_DICE_FACE = _COUNT + r"d(?P<faces>[0-9]+)"
_TARGET = r"(?:(?P<comp>[<>=]?)(?P<target>[0-9]+))?"
_NOT_OPERATOR = r"[^-+*/\s"

INT = r"[0-9]+"  # 42
KEEP_DICE = _N_DICE_FACE + r"k(?P<keep>[0-9]+)"  # 4d6k3
KEEP_LOW_DICE = _N_DICE_FACE + r"l(?P<keep>[0-9]+)"  # 4d6l1
N_DICE_FACE = _N_DICE_FACE  # d6, 2d6
DICE_X = _N_DICE_FACE + r"x"  # d6x
FUDGE_DICE = _COUNT + r"dF(?:\.(?P<weight>[0-9]+))?"  # dF, 4dF.1
CUSTOM_DICE = _COUNT + r"d\[(?P<faces>[0-9]+(?:/[0-9]+)+)\]"  # 2d[1/1/2/3]
COMPOUND_DICE = _N_DICE_FACE + r"!!" + _TARGET  # 3d6!!, 3d6!!>5
EXPLODE_DICE = _N_DICE_FACE + r"!" + _TARGET  # 3d6!, 3d6!>5, 3d6!5
EXPLODE_ADD_DICE = _N_DICE_FACE + r"\^(?:=?(?P<target>[0-9]+))?"  # 3d6^, 3d6^=5
SORT = r"(?P<value>.+?)\s*(?P<order>asc|desc)"  # 4d6 asc
MIN = r"(?P<left>.+)min(?P<right>.+)"  # 2 min 3d6
MAX = r"(?P<left>.+)max(?P<right>.+)"  # 2 max 3d6
TARGET_POOL = r"(?P<left>.+)(?P<comp>[<>=])\s*(?P<target>[0-9]+)"  # 4d10>6, (4d8-2)<6
# 10(2), (2)4; the sides may not end/start at an operator or another paren
NESTED = (
    r"(?P<left>(?:.*" + _NOT_OPERATOR + r"(])?)\s*"
    r"\((?P<nested>.*)\)"
    r"\s*(?P<right>(?:" + _NOT_OPERATOR + r")].*)?)"
)
ADD = r"(?P<left>.+)\+(?P<right>.+)"
SUB = r"(?P<left>.*" + _NOT_OPERATOR + r"])\s*-(?P<right>.+)"
MUL = r"(?P<left>.+)\*(?P<right>.+)"
DIV = r"(?P<left>.+)/(?P<right>.+)"
NEGATIVE = r"-(?P<value>.+)"  # -2d6


class Rule(typing.NamedTuple):
    name: str
    pattern: re.Pattern
    build: typing.Callable[[re.Match, int], tree.Expression]


def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE | re.DOTALL)


class RegexDice:
    def __init__(self, settings: typing.Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.rules: typing.Tuple[Rule, ...] = tuple(
            Rule(name, _compile(pattern), build)
            for name, pattern, build in (
                ("INT", INT, self.visit_int),
                ("KEEP_DICE", KEEP_DICE, self.visit_keep_dice),
                ("KEEP_LOW_DICE", KEEP_LOW_DICE, self.visit_keep_low_dice),
                ("N_DICE_FACE", N_DICE_FACE, self.visit_n_dice_face),
                ("DICE_X", DICE_X, self.visit_dice_x),
                ("FUDGE_DICE", FUDGE_DICE, self.visit_fudge_dice),
                ("CUSTOM_DICE", CUSTOM_DICE, self.visit_custom_dice),
                ("COMPOUND_DICE", COMPOUND_DICE, self.visit_compound_dice),
                ("EXPLODE_DICE", EXPLODE_DICE, self.visit_explode_dice),
                ("EXPLODE_ADD_DICE", EXPLODE_ADD_DICE, self.visit_explode_add_dice),
                ("SORT", SORT, self.visit_sort),
                ("MIN", MIN, self.visit_min),
                ("MAX", MAX, self.visit_max),
                ("TARGET_POOL", TARGET_POOL, self.visit_target_pool),
                ("NESTED", NESTED, self.visit_nested),
                ("ADD", ADD, self.visit_binary(tree.Add)),
                ("SUB", SUB, self.visit_binary(tree.Sub)),
                ("MUL", MUL, self.visit_binary(tree.Mul)),
                ("DIV", DIV, self.visit_binary(tree.Div)),
                ("NEGATIVE", NEGATIVE, self.visit_negative),
            )
        )

    def parse(self, expression: str) -> tree.Expression:
        if len(expression) > self.settings.max_expression_length:
            raise ParseError(
                "Expression is longer than %s characters"
                % self.settings.max_expression_length
            )
        return self._parse(expression, 0)

    def valid_expression(self, expression: str) -> bool:
        """Whether some rule matches ``expression`` as a whole.

        Sub-expressions are not checked, so ``parse`` can still fail on a
        valid expression.
        """
        trimmed = expression.strip()
        return any(rule.pattern.fullmatch(trimmed) for rule in self.rules)

    def _parse(self, expression: str, depth: int) -> tree.Expression:
        if depth > self.settings.max_parse_depth:
            raise ParseError("Expression '%s' is nested too deeply" % expression)

        trimmed = expression.strip()
        for rule in self.rules:
            match = rule.pattern.fullmatch(trimmed)
            if match is not None:
                logger.debug("%s matched '%s'", rule.name, trimmed)
                return rule.build(match, depth)
        raise ParseError("Failed to parse expression '%s'" % expression)

    # builders

    def visit_int(self, match: re.Match, depth: int) -> tree.Expression:
        return tree.Number(_int(match.group(0)))

    def visit_keep_dice(self, match: re.Match, depth: int) -> tree.Expression:
        faces, count = _faces_and_count(match)
        return tree.KeepDice(faces, count, _at_least_one(match, "keep"))

    def visit_keep_low_dice(self, match: re.Match, depth: int) -> tree.Expression:
        faces, count = _faces_and_count(match)
        return tree.KeepLowDice(faces, count, _at_least_one(match, "keep"))

    def visit_n_dice_face(self, match: re.Match, depth: int) -> tree.Expression:
        return tree.NDice(*_faces_and_count(match))

    def visit_dice_x(self, match: re.Match, depth: int) -> tree.Expression:
        return tree.DiceX(*_faces_and_count(match))

    def visit_fudge_dice(self, match: re.Match, depth: int) -> tree.Expression:
        count = _count(match)
        if match.group("weight") is None:
            return tree.FudgeDice(count)
        return tree.FudgeDice(count, 6, _int(match.group("weight")))

    def visit_custom_dice(self, match: re.Match, depth: int) -> tree.Expression:
        faces = tuple(_int(face) for face in match.group("faces").split("/"))
        return tree.CustomDice(faces, _count(match))

    def _rerolling(self, cls, match: re.Match) -> tree.Expression:
        faces, count = _faces_and_count(match)
        target = match.group("target")
        if target is None:
            return cls(faces, count)
        comparison = tree.Comparison.from_symbol(match.groupdict().get("comp") or "=")
        return cls(faces, count, comparison, _int(target))

    def visit_compound_dice(self, match: re.Match, depth: int) -> tree.Expression:
        return self._rerolling(tree.CompoundingDice, match)

    def visit_explode_dice(self, match: re.Match, depth: int) -> tree.Expression:
        return self._rerolling(tree.ExplodingDice, match)

    def visit_explode_add_dice(self, match: re.Match, depth: int) -> tree.Expression:
        return self._rerolling(tree.ExplodingAddDice, match)

    def visit_sort(self, match: re.Match, depth: int) -> tree.Expression:
        value = self._parse(match.group("value"), depth + 1)
        return tree.Sorted(value, match.group("order").lower() == "asc")

    def visit_min(self, match: re.Match, depth: int) -> tree.Expression:
        return tree.Min(
            self._parse(match.group("left"), depth + 1),
            self._parse(match.group("right"), depth + 1),
        )

    def visit_max(self, match: re.Match, depth: int) -> tree.Expression:
        return tree.Max(
            self._parse(match.group("left"), depth + 1),
            self._parse(match.group("right"), depth + 1),
        )

    def visit_target_pool(self, match: re.Match, depth: int) -> tree.Expression:
        return tree.TargetPool(
            self._parse(match.group("left"), depth + 1),
            tree.Comparison.from_symbol(match.group("comp")),
            _int(match.group("target")),
        )

    def visit_nested(self, match: re.Match, depth: int) -> tree.Expression:
        result = self._parse(match.group("nested"), depth + 1)
        if match.group("left"):
            result = tree.Mul(self._parse(match.group("left"), depth + 1), result)
        if match.group("right"):
            result = tree.Mul(result, self._parse(match.group("right"), depth + 1))
        return result

    def visit_binary(self, cls):
        def build(match: re.Match, depth: int) -> tree.Expression:
            return cls(
                self._parse(match.group("left"), depth + 1),
                self._parse(match.group("right"), depth + 1),
            )

        return build

    def visit_negative(self, match: re.Match, depth: int) -> tree.Expression:
        return tree.Negative(self._parse(match.group("value"), depth + 1))


def _int(text: str) -> int:
    value = int(text)
    if value > tree.INT_MAX:
        raise ParseError("Number '%s' is too large" % text)
    return value


def _count(match: re.Match) -> int:
    count = match.group("count")
    if not count:
        return 1
    return _at_least_one(match, "count")


def _at_least_one(match: re.Match, group: str) -> int:
    value = _int(match.group(group))
    if value < 1:
        raise ParseError("%s must be at least 1 in '%s'" % (group, match.group(0)))
    return value


def _faces_and_count(match: re.Match) -> typing.Tuple[int, int]:
    return _at_least_one(match, "faces"), _count(match)


_default = RegexDice()


def parse(text: str) -> tree.Expression:
    return _default.parse(text)


def valid_expression(text: str) -> bool:
    return _default.valid_expression(text)

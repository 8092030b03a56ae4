import dataclasses
import enum
import typing

from diceroll.errors import InvalidComparisonToken

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1


class Comparison(enum.Enum):
    """How a rolled value is tested against a target number.

    The notation only has ``>``, ``<`` and ``=``; the first two are inclusive,
    so ``4d10>6`` counts sixes too.
    """

    GREATER_OR_EQUAL = ">"
    LESS_OR_EQUAL = "<"
    EQUAL = "="

    @classmethod
    def from_symbol(cls, text: str) -> "Comparison":
        try:
            return cls(text)
        except ValueError:
            raise InvalidComparisonToken(text) from None

    @property
    def symbol(self) -> str:
        return self.value

    def matches(self, value: int, target: int) -> bool:
        if self is Comparison.GREATER_OR_EQUAL:
            return value >= target
        elif self is Comparison.LESS_OR_EQUAL:
            return value <= target
        else:
            return value == target


class Operation(enum.Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    @property
    def symbol(self) -> str:
        return self.value


class Expression:
    def description(self) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.description()


def _frozen(cls):
    return dataclasses.dataclass(frozen=True, repr=False)(cls)


@_frozen
class Number(Expression):
    value: int

    def description(self) -> str:
        return str(self.value)


class Dice(Expression):
    """Base class for the nodes that roll dice themselves."""

    count: int

    def _prefix(self) -> str:
        return "" if self.count == 1 else str(self.count)


@_frozen
class NDice(Dice):
    faces: int
    count: int = 1

    def description(self) -> str:
        return "%sd%s" % (self._prefix(), self.faces)


@_frozen
class DiceX(Dice):
    """``d6x``: roll the same dice twice and multiply the two totals."""

    faces: int
    count: int = 1

    def description(self) -> str:
        return "%sd%sX" % (self._prefix(), self.faces)


@_frozen
class FudgeDice(Dice):
    count: int = 1
    faces: int = 6
    weight: typing.Optional[int] = None

    def __post_init__(self):
        if self.weight is None:
            object.__setattr__(self, "weight", self.faces // 3)

    def description(self) -> str:
        extra = "" if self.weight == self.faces // 3 else ".%s" % self.weight
        return "%sdF%s" % (self.count, extra)


@_frozen
class CustomDice(Dice):
    faces: typing.Tuple[int, ...]
    count: int = 1

    def __post_init__(self):
        object.__setattr__(self, "faces", tuple(self.faces))

    def description(self) -> str:
        return "%sd[%s]" % (self._prefix(), "/".join(str(f) for f in self.faces))


@_frozen
class KeepDice(Dice):
    faces: int
    count: int
    keep: int

    def description(self) -> str:
        return "%sd%sk%s" % (self.count, self.faces, self.keep)


@_frozen
class KeepLowDice(Dice):
    faces: int
    count: int
    keep: int

    def description(self) -> str:
        return "%sd%sl%s" % (self.count, self.faces, self.keep)


class RerollingDice(Dice):
    faces: int
    comparison: Comparison
    target: typing.Optional[int]
    marker: typing.ClassVar[str] = ""

    def __post_init__(self):
        if self.target is None:
            object.__setattr__(self, "target", self.faces)

    def description(self) -> str:
        extra = ""
        if self.comparison is not Comparison.EQUAL or self.target != self.faces:
            extra = "%s%s" % (self.comparison.symbol, self.target)
        return "%sd%s%s%s" % (self.count, self.faces, self.marker, extra)


@_frozen
class ExplodingDice(RerollingDice):
    """Each die matching the trigger adds another die, recursively."""

    faces: int
    count: int
    comparison: Comparison = Comparison.EQUAL
    target: typing.Optional[int] = None
    marker: typing.ClassVar[str] = "!"


@_frozen
class ExplodingAddDice(RerollingDice):
    """Like :class:`ExplodingDice`, but re-rolls add onto the die that
    triggered them instead of showing up as separate dice."""

    faces: int
    count: int
    comparison: Comparison = Comparison.EQUAL
    target: typing.Optional[int] = None
    marker: typing.ClassVar[str] = "^"


@_frozen
class CompoundingDice(RerollingDice):
    """Every die matching the trigger re-rolls the whole batch."""

    faces: int
    count: int
    comparison: Comparison = Comparison.EQUAL
    target: typing.Optional[int] = None
    marker: typing.ClassVar[str] = "!!"


class BiMathOp(Expression):
    left: Expression
    right: Expression
    operation: typing.ClassVar[Operation]

    def description(self) -> str:
        return "%s %s %s" % (self.left, self.operation.symbol, self.right)


@_frozen
class Add(BiMathOp):
    left: Expression
    right: Expression
    operation: typing.ClassVar[Operation] = Operation.ADD


@_frozen
class Sub(BiMathOp):
    left: Expression
    right: Expression
    operation: typing.ClassVar[Operation] = Operation.SUBTRACT


@_frozen
class Mul(BiMathOp):
    left: Expression
    right: Expression
    operation: typing.ClassVar[Operation] = Operation.MULTIPLY


@_frozen
class Div(BiMathOp):
    left: Expression
    right: Expression
    operation: typing.ClassVar[Operation] = Operation.DIVIDE


@_frozen
class TargetPool(Expression):
    """Count the results of ``left`` meeting the target instead of summing."""

    left: Expression
    comparison: Comparison
    target: int

    def description(self) -> str:
        left = self.left.description()
        if isinstance(self.left, BiMathOp):
            left = "(%s)" % left
        return "%s%s%s" % (left, self.comparison.symbol, self.target)


@_frozen
class Negative(Expression):
    value: Expression

    def description(self) -> str:
        return "-%s" % self.value


@_frozen
class Sorted(Expression):
    value: Expression
    ascending: bool

    def description(self) -> str:
        return "%s %s" % (self.value, "asc" if self.ascending else "desc")


@_frozen
class Min(Expression):
    left: Expression
    right: Expression

    def description(self) -> str:
        return "min(%s, %s)" % (self.left, self.right)


@_frozen
class Max(Expression):
    left: Expression
    right: Expression

    def description(self) -> str:
        return "max(%s, %s)" % (self.left, self.right)


@dataclasses.dataclass(frozen=True)
class ResultTree:
    """The value an expression rolled, and the results it was built from."""

    expression: Expression
    value: int
    results: typing.Tuple["ResultTree", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "results", tuple(self.results))

    def leaves(self) -> typing.List[int]:
        if not self.results:
            return [self.value]
        values: typing.List[int] = []
        for result in self.results:
            values.extend(result.leaves())
        return values


def debug(result: ResultTree) -> str:
    """Render a result tree as an indented trace, one line per node."""
    lines: typing.List[str] = []

    def walk(node: ResultTree, prefix: str) -> None:
        lines.append("%s%s = %s\n" % (prefix, node.expression.description(), node.value))
        for child in node.results:
            walk(child, prefix + "--")

    walk(result, "")
    return "".join(lines)

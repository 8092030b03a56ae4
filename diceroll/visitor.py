import logging
import random
import typing

import diceroll.tree as tree
from diceroll.config import Settings
from diceroll.errors import (
    ArithmeticOverflow,
    CompoundLimitExceeded,
    ExplosionLimitExceeded,
)
from diceroll.tree import ResultTree

logger = logging.getLogger(__name__)

RandomSource = typing.Callable[[int], int]


def default_random_source(faces: int) -> int:
    return random.randint(1, faces)


def _checked(value: int, what) -> int:
    if value < tree.INT_MIN or value > tree.INT_MAX:
        raise ArithmeticOverflow("Integer overflow while computing %s" % what)
    return value


def _total(values: typing.Iterable[int], expression: tree.Expression) -> int:
    total = 0
    for value in values:
        total = _checked(total + value, expression)
    return total


def _leaf_total(leaves: typing.Sequence[ResultTree], expression: tree.Expression) -> int:
    return _total((leaf.value for leaf in leaves), expression)


class DiceRollingVisitor:
    """Rolls an expression tree, producing a :class:`ResultTree`.

    ``random_source`` is called with a number of faces and must return a
    value between 1 and that number; tests pass a scripted one.
    """

    def __init__(
        self,
        random_source: typing.Optional[RandomSource] = None,
        settings: typing.Optional[Settings] = None,
    ) -> None:
        self.random_source = random_source or default_random_source
        self.settings = settings or Settings()

    def visit(self, expression: tree.Expression) -> ResultTree:
        for cls in type(expression).__mro__:
            method = getattr(self, "visit_" + cls.__name__, None)
            if method is not None:
                return method(expression)
        raise NotImplementedError(
            "Could not visit unknown type: %s" % type(expression).__name__
        )

    def random(self, faces: int) -> int:
        return self.random_source(faces)

    def _roll_leaves(self, faces: int, count: int) -> typing.List[ResultTree]:
        leaf = tree.NDice(faces)
        return [ResultTree(leaf, self.random(faces)) for _ in range(count)]

    def visit_Number(self, number: tree.Number) -> ResultTree:
        return ResultTree(number, number.value)

    def visit_BiMathOp(self, math: tree.BiMathOp) -> ResultTree:
        left = self.visit(math.left)
        right = self.visit(math.right)

        if math.operation is tree.Operation.ADD:
            value = left.value + right.value
        elif math.operation is tree.Operation.SUBTRACT:
            value = left.value - right.value
        elif math.operation is tree.Operation.MULTIPLY:
            value = left.value * right.value
        else:
            value = left.value // right.value

        return ResultTree(math, _checked(value, math), (left, right))

    def visit_NDice(self, dice: tree.NDice) -> ResultTree:
        leaf = tree.NDice(dice.faces)
        leaves = []
        total = 0
        # overflow is checked while rolling so huge pools fail early
        for _ in range(dice.count):
            value = self.random(dice.faces)
            total = _checked(total + value, dice)
            leaves.append(ResultTree(leaf, value))
        return ResultTree(dice, total, leaves)

    def visit_DiceX(self, dice: tree.DiceX) -> ResultTree:
        n_dice = tree.NDice(dice.faces, dice.count)
        left = self.visit(n_dice)
        right = self.visit(n_dice)
        return ResultTree(dice, _checked(left.value * right.value, dice), (left, right))

    def _fudge(self, faces: int, weight: int) -> int:
        value = self.random(faces)
        if value > faces - weight:
            return 1
        elif value > faces - weight * 2:
            return -1
        return 0

    def visit_FudgeDice(self, dice: tree.FudgeDice) -> ResultTree:
        leaf = tree.FudgeDice(1, dice.faces, dice.weight)
        leaves = [
            ResultTree(leaf, self._fudge(dice.faces, dice.weight))
            for _ in range(dice.count)
        ]
        return ResultTree(dice, _leaf_total(leaves, dice), leaves)

    def visit_CustomDice(self, dice: tree.CustomDice) -> ResultTree:
        leaf = tree.CustomDice(dice.faces)
        leaves = [
            ResultTree(leaf, dice.faces[self.random(len(dice.faces)) - 1])
            for _ in range(dice.count)
        ]
        return ResultTree(dice, _leaf_total(leaves, dice), leaves)

    def visit_KeepDice(self, dice: tree.KeepDice) -> ResultTree:
        leaves = self._roll_leaves(dice.faces, dice.count)
        kept = sorted((leaf.value for leaf in leaves), reverse=True)[: dice.keep]
        return ResultTree(dice, _total(kept, dice), leaves)

    def visit_KeepLowDice(self, dice: tree.KeepLowDice) -> ResultTree:
        leaves = self._roll_leaves(dice.faces, dice.count)
        kept = sorted(leaf.value for leaf in leaves)[: dice.keep]
        return ResultTree(dice, _total(kept, dice), leaves)

    def _explode(self, dice: tree.RerollingDice) -> typing.List[int]:
        """Roll one die plus every re-roll it triggers."""
        value = self.random(dice.faces)
        rolls = [value]
        while dice.comparison.matches(value, dice.target):
            if len(rolls) > self.settings.explosion_limit:
                raise ExplosionLimitExceeded(dice, self.settings.explosion_limit)
            logger.debug("%s exploded on %s", dice, value)
            value = self.random(dice.faces)
            rolls.append(value)
        return rolls

    def visit_ExplodingDice(self, dice: tree.ExplodingDice) -> ResultTree:
        leaf = tree.NDice(dice.faces)
        leaves = [
            ResultTree(leaf, value)
            for _ in range(dice.count)
            for value in self._explode(dice)
        ]
        return ResultTree(dice, _leaf_total(leaves, dice), leaves)

    def visit_ExplodingAddDice(self, dice: tree.ExplodingAddDice) -> ResultTree:
        leaf = tree.NDice(dice.faces)
        leaves = [
            ResultTree(leaf, _total(self._explode(dice), dice))
            for _ in range(dice.count)
        ]
        return ResultTree(dice, _leaf_total(leaves, dice), leaves)

    def _compound(self, dice: tree.CompoundingDice, depth: int) -> typing.List[int]:
        if depth > self.settings.compound_limit:
            raise CompoundLimitExceeded(dice, self.settings.compound_limit)

        batch = [self.random(dice.faces) for _ in range(dice.count)]
        rolls = list(batch)
        for value in batch:
            if dice.comparison.matches(value, dice.target):
                logger.debug("%s compounded on %s", dice, value)
                rolls.extend(self._compound(dice, depth + 1))
        return rolls

    def visit_CompoundingDice(self, dice: tree.CompoundingDice) -> ResultTree:
        leaf = tree.NDice(dice.faces)
        leaves = [ResultTree(leaf, value) for value in self._compound(dice, 0)]
        return ResultTree(dice, _leaf_total(leaves, dice), leaves)

    def visit_TargetPool(self, pool: tree.TargetPool) -> ResultTree:
        left = self.visit(pool.left)
        candidates = left.results or (left,)
        hits = sum(
            1 for result in candidates if pool.comparison.matches(result.value, pool.target)
        )
        return ResultTree(pool, hits, candidates)

    def _negate(self, result: ResultTree) -> ResultTree:
        return ResultTree(
            result.expression,
            _checked(-result.value, result.expression),
            [self._negate(child) for child in result.results],
        )

    def visit_Negative(self, negative: tree.Negative) -> ResultTree:
        result = self._negate(self.visit(negative.value))
        return ResultTree(negative, result.value, result.results)

    def _order(self, result: ResultTree, ascending: bool) -> ResultTree:
        results = sorted(
            (self._order(child, ascending) for child in result.results),
            key=lambda child: child.value,
            reverse=not ascending,
        )
        return ResultTree(result.expression, result.value, results)

    def visit_Sorted(self, expression: tree.Sorted) -> ResultTree:
        result = self._order(self.visit(expression.value), expression.ascending)
        return ResultTree(expression, result.value, result.results)

    def visit_Min(self, expression: tree.Min) -> ResultTree:
        left = self.visit(expression.left)
        right = self.visit(expression.right)
        chosen = right if left.value > right.value else left
        return ResultTree(expression, chosen.value, (chosen,))

    def visit_Max(self, expression: tree.Max) -> ResultTree:
        left = self.visit(expression.left)
        right = self.visit(expression.right)
        chosen = left if left.value > right.value else right
        return ResultTree(expression, chosen.value, (chosen,))

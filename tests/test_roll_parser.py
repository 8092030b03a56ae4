"""Tests for the regex rule cascade that parses dice notation."""

import pytest

from diceroll.config import Settings
from diceroll.errors import ParseError
from diceroll.roll_parser import RegexDice, parse, valid_expression
from diceroll.tree import (
    Add,
    Comparison,
    CompoundingDice,
    CustomDice,
    DiceX,
    Div,
    ExplodingAddDice,
    ExplodingDice,
    FudgeDice,
    KeepDice,
    KeepLowDice,
    Max,
    Min,
    Mul,
    NDice,
    Negative,
    Number,
    Sorted,
    Sub,
    TargetPool,
)

GE = Comparison.GREATER_OR_EQUAL
LE = Comparison.LESS_OR_EQUAL
EQ = Comparison.EQUAL


class TestDice:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("42", Number(42)),
            ("  42 ", Number(42)),
            ("d6", NDice(6)),
            ("2d6", NDice(6, 2)),
            ("2D6", NDice(6, 2)),
            ("4d6k3", KeepDice(6, 4, 3)),
            ("d20k1", KeepDice(20, 1, 1)),
            ("4d6l1", KeepLowDice(6, 4, 1)),
            ("4D6L2", KeepLowDice(6, 4, 2)),
            ("d10x", DiceX(10)),
            ("2d6X", DiceX(6, 2)),
            ("dF", FudgeDice()),
            ("4df", FudgeDice(4)),
            ("4dF.1", FudgeDice(4, 6, 1)),
            ("dF.1", FudgeDice(1, 6, 1)),
            ("d[1/1/1/2/2/3]", CustomDice((1, 1, 1, 2, 2, 3))),
            ("2d[1/2]", CustomDice((1, 2), 2)),
            ("3d6!", ExplodingDice(6, 3)),
            ("3d6!5", ExplodingDice(6, 3, EQ, 5)),
            ("3d6!>5", ExplodingDice(6, 3, GE, 5)),
            ("3d6!<1", ExplodingDice(6, 3, LE, 1)),
            ("3d6!!", CompoundingDice(6, 3)),
            ("3d6!!>5", CompoundingDice(6, 3, GE, 5)),
            ("2d6^", ExplodingAddDice(6, 2)),
            ("2d6^5", ExplodingAddDice(6, 2, EQ, 5)),
            ("2d6^=5", ExplodingAddDice(6, 2, EQ, 5)),
        ],
    )
    def test_dice(self, text, expected) -> None:
        assert parse(text) == expected


class TestOperators:
    def test_add(self) -> None:
        assert parse("1 +2") == Add(Number(1), Number(2))

    def test_subtract(self) -> None:
        assert parse("2d6-2") == Sub(NDice(6, 2), Number(2))

    def test_multiply_and_divide(self) -> None:
        assert parse("2 * 2") == Mul(Number(2), Number(2))
        assert parse("7 / 2") == Div(Number(7), Number(2))

    def test_addition_splits_before_multiplication(self) -> None:
        assert parse("d6+10*d6") == Add(NDice(6), Mul(Number(10), NDice(6)))
        assert parse("d6*10+d6") == Add(Mul(NDice(6), Number(10)), NDice(6))

    def test_chains_split_at_the_last_operator(self) -> None:
        assert parse("5-2-1") == Sub(Sub(Number(5), Number(2)), Number(1))
        assert parse("1+2+3") == Add(Add(Number(1), Number(2)), Number(3))

    def test_negative(self) -> None:
        assert parse("-2") == Negative(Number(2))
        assert parse("-4d6l1") == Negative(KeepLowDice(6, 4, 1))

    def test_leading_minus_binds_to_the_first_operand(self) -> None:
        assert parse("-2d6-2") == Sub(Negative(NDice(6, 2)), Number(2))
        assert parse("-2d6+2") == Add(Negative(NDice(6, 2)), Number(2))
        assert parse("-2d6*2") == Mul(Negative(NDice(6, 2)), Number(2))

    def test_minus_after_an_operator_is_a_negative(self) -> None:
        assert parse("2 - -3") == Sub(Number(2), Negative(Number(3)))
        assert parse("2*-3") == Mul(Number(2), Negative(Number(3)))


class TestNested:
    def test_parentheses(self) -> None:
        assert parse("(2)") == Number(2)
        assert parse("(1+2)") == Add(Number(1), Number(2))
        assert parse("((1+2))") == Add(Number(1), Number(2))

    def test_implicit_multiplication(self) -> None:
        assert parse("10(2)") == Mul(Number(10), Number(2))
        assert parse("(2)4") == Mul(Number(2), Number(4))
        assert parse("(1+ 2)3") == Mul(Add(Number(1), Number(2)), Number(3))
        assert parse("(1+2)d6") == Mul(Add(Number(1), Number(2)), NDice(6))
        assert parse("2(2d6)") == Mul(Number(2), NDice(6, 2))

    def test_operator_next_to_parentheses(self) -> None:
        assert parse("(1+2)+3") == Add(Add(Number(1), Number(2)), Number(3))
        assert parse("2*(3)") == Mul(Number(2), Number(3))
        assert parse("-(2d6)") == Negative(NDice(6, 2))


class TestModifiers:
    def test_target_pool(self) -> None:
        assert parse("4d8=8") == TargetPool(NDice(8, 4), EQ, 8)
        assert parse("4d10>6") == TargetPool(NDice(10, 4), GE, 6)

    def test_target_pool_over_a_sub_expression(self) -> None:
        assert parse("(4d8-2)<6") == TargetPool(Sub(NDice(8, 4), Number(2)), LE, 6)
        assert parse("(4d6!>5)>5") == TargetPool(ExplodingDice(6, 4, GE, 5), GE, 5)
        assert parse("2d8+2<6") == TargetPool(Add(NDice(8, 2), Number(2)), LE, 6)

    def test_exploding_target_wins_over_target_pool(self) -> None:
        assert parse("4d6!>5") == ExplodingDice(6, 4, GE, 5)

    def test_exploding_add_with_comparison_is_a_target_pool(self) -> None:
        assert parse("2d6^>10") == TargetPool(ExplodingAddDice(6, 2), GE, 10)

    def test_sort_wraps_the_whole_expression(self) -> None:
        assert parse("-2d6+2asc") == Sorted(Add(Negative(NDice(6, 2)), Number(2)), True)
        assert parse("-2d6-4 desc") == Sorted(Sub(Negative(NDice(6, 2)), Number(4)), False)
        assert parse("2 desc") == Sorted(Number(2), False)

    def test_min_and_max_bind_looser_than_arithmetic(self) -> None:
        assert parse("2 min 100 + 2d6") == Min(
            Number(2), Add(Number(100), NDice(6, 2))
        )
        assert parse("(100 + 2d6) max (2 *2)") == Max(
            Add(Number(100), NDice(6, 2)), Mul(Number(2), Number(2))
        )
        assert parse("3min-4d6l1") == Min(Number(3), Negative(KeepLowDice(6, 4, 1)))


class TestRuleOrder:
    def _names(self):
        return [rule.name for rule in RegexDice().rules]

    @pytest.mark.parametrize(
        "first, second",
        [
            ("KEEP_DICE", "N_DICE_FACE"),
            ("KEEP_LOW_DICE", "N_DICE_FACE"),
            ("EXPLODE_DICE", "TARGET_POOL"),
            ("COMPOUND_DICE", "TARGET_POOL"),
            ("SORT", "SUB"),
            ("MIN", "NESTED"),
            ("MAX", "ADD"),
            ("TARGET_POOL", "NESTED"),
            ("NESTED", "ADD"),
            ("ADD", "MUL"),
            ("SUB", "NEGATIVE"),
        ],
    )
    def test_order(self, first, second) -> None:
        names = self._names()
        assert names.index(first) < names.index(second)


class TestErrors:
    def test_no_rule_matches(self) -> None:
        with pytest.raises(ParseError, match="Failed to parse expression '4w6!!'"):
            parse("4w6!!")

    def test_message_names_the_untrimmed_input(self) -> None:
        with pytest.raises(ParseError) as e:
            parse(" nope ")
        assert str(e.value) == "Failed to parse expression ' nope '"

    def test_sub_expression_failure_propagates(self) -> None:
        with pytest.raises(ParseError, match="'w'"):
            parse("2d6+w")

    @pytest.mark.parametrize("text", ["0d6", "2d0", "4d6k0", "0dF"])
    def test_zero_counts_and_faces(self, text) -> None:
        with pytest.raises(ParseError):
            parse(text)

    def test_number_too_large(self) -> None:
        with pytest.raises(ParseError, match="too large"):
            parse("2147483648")

    def test_expression_too_long(self) -> None:
        parser = RegexDice(Settings(max_expression_length=5))
        assert parser.parse("1+1+1") == Add(Add(Number(1), Number(1)), Number(1))
        with pytest.raises(ParseError, match="longer than 5"):
            parser.parse("1+1+1+1")

    def test_expression_nested_too_deeply(self) -> None:
        parser = RegexDice(Settings(max_parse_depth=3))
        assert parser.parse("(((1)))") == Number(1)
        with pytest.raises(ParseError, match="nested too deeply"):
            parser.parse("((((1))))")


class TestValidExpression:
    def test_valid(self) -> None:
        assert valid_expression("4d6!!")
        assert valid_expression(" 2d6 + 3 ")

    def test_invalid(self) -> None:
        assert not valid_expression("4w6!!")
        assert not valid_expression("")
        assert not valid_expression("(1")

    def test_sub_expressions_are_not_checked(self) -> None:
        assert valid_expression("1+(")
        with pytest.raises(ParseError):
            parse("1+(")

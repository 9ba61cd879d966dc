"""Tests for the dice expression grammar."""

import pytest

from diceroll.roll import (
    Add,
    Dice,
    Div,
    DropHigh,
    DropLow,
    Explode,
    KeepHigh,
    KeepLow,
    Mul,
    Number,
    ParseError,
    Repetition,
    Sub,
    ZeroSidedDie,
)
from diceroll.roll_parser import MAX_NUMBER, parse, parse_all


def dice(count, sides, *modifiers):
    return Dice(Number(count), Number(sides), modifiers)


class TestParseTerms:
    """Numbers, dice and repetitions on their own."""

    def test_number(self):
        assert parse("4") == Number(4)

    def test_largest_number(self):
        assert parse(str(MAX_NUMBER)) == Number(MAX_NUMBER)

    def test_dice(self):
        assert parse("3d6") == dice(3, 6)

    def test_dice_without_count_rolls_one(self):
        assert parse("d20") == dice(1, 20)

    def test_dice_count_from_expression(self):
        assert parse("(2+1)d6") == Dice(Add(Number(2), Number(1)), Number(6))

    def test_square_brackets_group(self):
        assert parse("[2+1]d6") == parse("(2+1)d6")

    def test_repetition(self):
        assert parse("3(1d6)") == Repetition(Number(3), dice(1, 6))

    def test_repetition_of_arithmetic(self):
        assert parse("3(1d6+2)") == Repetition(
            Number(3), Add(dice(1, 6), Number(2))
        )

    def test_repetition_count_from_group(self):
        assert parse("[2](1d6)") == Repetition(Number(2), dice(1, 6))

    def test_repetition_with_modifiers(self):
        assert parse("2(4d6)kh3") == Repetition(
            Number(2), dice(4, 6), [KeepHigh(Number(3))]
        )

    def test_case_insensitive(self):
        assert parse("4D6KH3") == parse("4d6kh3")


class TestParseModifiers:
    """Keep, drop and explode suffixes."""

    def test_keep_high(self):
        assert parse("4d6kh3") == dice(4, 6, KeepHigh(Number(3)))

    def test_bare_k_is_keep_high(self):
        assert parse("4d6k3") == parse("4d6kh3")

    def test_keep_low(self):
        assert parse("2d20kl1") == dice(2, 20, KeepLow(Number(1)))

    def test_drop_high(self):
        assert parse("4d6dh1") == dice(4, 6, DropHigh(Number(1)))

    def test_bare_d_is_drop_high(self):
        assert parse("4d6d1") == parse("4d6dh1")

    def test_drop_low(self):
        assert parse("2d10dl1") == dice(2, 10, DropLow(Number(1)))

    def test_explode(self):
        assert parse("3d3!") == dice(3, 3, Explode())

    def test_explode_with_threshold(self):
        assert parse("1d6!5") == dice(1, 6, Explode(Number(5)))

    def test_modifier_without_count(self):
        assert parse("4d6kl") == dice(4, 6, KeepLow())

    def test_modifier_count_from_group(self):
        assert parse("4d6kh(1+1)") == dice(4, 6, KeepHigh(Add(Number(1), Number(1))))

    def test_modifiers_keep_declared_order(self):
        assert parse("5d6kh4dl1!") == dice(
            5, 6, KeepHigh(Number(4)), DropLow(Number(1)), Explode()
        )

    def test_whitespace_between_tokens(self):
        assert parse(" 4d6 kh 3 ") == parse("4d6kh3")

    def test_tabs_are_whitespace(self):
        assert parse("1d6\t+\t2") == parse("1d6+2")


class TestParseArithmetic:
    """Operator precedence and associativity."""

    def test_addition(self):
        assert parse("2d6 + 3") == Add(dice(2, 6), Number(3))

    def test_multiplication_binds_tighter(self):
        assert parse("2d6 + 3 * 2") == Add(dice(2, 6), Mul(Number(3), Number(2)))

    def test_subtraction_is_left_associative(self):
        assert parse("10 - 2 - 3") == Sub(Sub(Number(10), Number(2)), Number(3))

    def test_division_and_multiplication_left_to_right(self):
        assert parse("8 / 2 * 3") == Mul(Div(Number(8), Number(2)), Number(3))

    def test_parentheses_override_precedence(self):
        assert parse("(2d6+1)*2") == Mul(Add(dice(2, 6), Number(1)), Number(2))


class TestParseAll:
    """Several whitespace-separated expressions in one input."""

    def test_two_expressions(self):
        expressions = parse_all("3d6 4(1d4) + 4")
        assert expressions == [
            dice(3, 6),
            Add(Repetition(Number(4), dice(1, 4)), Number(4)),
        ]

    def test_single_expression(self):
        assert parse_all("2d6 + 3") == [parse("2d6 + 3")]

    def test_parse_rejects_several_expressions(self):
        with pytest.raises(ParseError, match="single expression"):
            parse("1d6 1d8")


class TestParseErrors:
    """Malformed input."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            "(1d6",
            "1d6)",
            "[1d6)",
            "2d6 +",
            "* 2",
            "2d",
            "1d6x",
            "1.5",
            "-3",
            "3(1d6)!",
        ],
    )
    def test_syntax_error(self, text):
        with pytest.raises(ParseError):
            parse(text)

    def test_number_too_large(self):
        with pytest.raises(ParseError, match="too large"):
            parse(str(MAX_NUMBER + 1))

    def test_zero_sided_die(self):
        with pytest.raises(ZeroSidedDie):
            parse("1d0")

    def test_zero_sided_die_without_count(self):
        with pytest.raises(ZeroSidedDie):
            parse("2 + d0")


class TestRender:
    """Trees render back to dice notation."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("4d6kh3", "4d6kh3"),
            ("d20", "1d20"),
            ("4d6k", "4d6kh"),
            ("(2d6+1)*2", "(2d6 + 1) * 2"),
            ("10-(2-3)", "10 - (2 - 3)"),
            ("3(1d6+2)kl1", "3(1d6 + 2)kl1"),
            ("(1d3)d6!", "(1d3)d6!"),
            ("4d6kh(1+1)", "4d6kh(1 + 1)"),
        ],
    )
    def test_repr(self, text, expected):
        assert repr(parse(text)) == expected

    def test_rendered_text_parses_to_same_tree(self):
        tree = parse("[1d4+1](2d6dl1 * 2) - 8 / (1d3)")
        assert parse(repr(tree)) == tree

import logging
import os
import typing

import lark

import diceroll.roll as roll

logger = logging.getLogger(__name__)

MAX_NUMBER = 2**31 - 1


@lark.v_args(inline=True)
class _RollParser(lark.Transformer):
    add = roll.Add
    sub = roll.Sub
    mul = roll.Mul
    div = roll.Div
    explode = roll.Explode
    keep_high = roll.KeepHigh
    keep_low = roll.KeepLow
    drop_high = roll.DropHigh
    drop_low = roll.DropLow
    repetition = lambda self, times, body, *modifiers: roll.Repetition(
        times, body, modifiers
    )

    def start(self, *expressions: roll.Expression) -> typing.List[roll.Expression]:
        return list(expressions)

    def number(self, token: lark.Token) -> roll.Number:
        value = int(token)
        if value > MAX_NUMBER:
            raise roll.ParseError(
                "number %s is too large (maximum is %s)" % (token, MAX_NUMBER)
            )
        return roll.Number(value)

    def dice(self, count: roll.Expression, sides: roll.Number, *modifiers):
        if sides.value == 0:
            raise roll.ZeroSidedDie("attempted to roll a die with 0 faces")
        return roll.Dice(count, sides, modifiers)

    def single_die(self, sides: roll.Number, *modifiers):
        return self.dice(roll.Number(1), sides, *modifiers)


_grammar_file = os.path.join(os.path.dirname(__file__), "roll.lark")
with open(_grammar_file) as f:
    _grammar = lark.Lark(f, parser="lalr", maybe_placeholders=True)


def parse_all(text: str) -> typing.List[roll.Expression]:
    try:
        expressions = _RollParser().transform(_grammar.parse(text))
    except lark.exceptions.VisitError as e:
        raise e.orig_exc
    except lark.exceptions.UnexpectedInput as e:
        raise roll.ParseError(
            "syntax error:\n%s" % e.get_context(text).rstrip("\n")
        ) from e
    logger.debug("parsed %r into %s", text, expressions)
    return expressions


def parse(text: str) -> roll.Expression:
    expressions = parse_all(text)
    if len(expressions) != 1:
        raise roll.ParseError(
            "expected a single expression, got %s: %s"
            % (len(expressions), ", ".join(str(x) for x in expressions))
        )
    return expressions[0]

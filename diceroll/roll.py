import functools
import logging
import random
import typing

logger = logging.getLogger(__name__)

DEFAULT_EXPLOSION_LIMIT = 1000
DEFAULT_DICE_LIMIT = 10000


class DiceRollError(ValueError):
    pass


class ParseError(DiceRollError):
    pass


class EvalError(DiceRollError):
    pass


class DivisionByZero(EvalError):
    pass


class ZeroSidedDie(EvalError):
    pass


class NegativeDiceCount(EvalError):
    pass


class ExplosionLimitExceeded(EvalError):
    pass


class DiceLimitExceeded(EvalError):
    pass


class RandomSource(typing.Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


class RollResult(typing.NamedTuple):
    value: int
    rolls: typing.Tuple[int, ...]


def format_rolls(rolls: typing.Iterable[int]) -> str:
    return "[" + ", ".join(str(x) for x in rolls) + "]"


class Context:
    def __init__(
        self,
        rng: RandomSource,
        explosion_limit: int = DEFAULT_EXPLOSION_LIMIT,
        dice_limit: int = DEFAULT_DICE_LIMIT,
    ) -> None:
        self.rng = rng
        self.explosion_limit = explosion_limit
        self.dice_limit = dice_limit
        self.rolls: typing.List[int] = []

    def die(self, sides: int) -> int:
        value = self.rng.randint(1, sides)
        self.rolls.append(value)
        return value


class Node:
    _frozen = False

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if "__init__" not in cls.__dict__:
            return
        init = cls.__init__

        @functools.wraps(init)
        def __init__(self, *args, **kwargs):
            init(self, *args, **kwargs)
            object.__setattr__(self, "_frozen", True)

        cls.__init__ = __init__

    def __setattr__(self, name: str, value) -> None:
        if self._frozen:
            raise AttributeError("'%s' is immutable" % self.__class__.__name__)
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        raise AttributeError("'%s' is immutable" % self.__class__.__name__)

    def __eq__(self, other) -> bool:
        return self.__class__ is other.__class__ and vars(self) == vars(other)

    def __hash__(self) -> int:
        return hash((self.__class__, tuple(vars(self).values())))


class Expression(Node):
    precedence = 3

    def roll(self, ctx: Context) -> int:
        raise NotImplementedError


def _wrap(expr: Expression, precedence: int) -> str:
    if expr.precedence < precedence:
        return "(%s)" % expr
    return str(expr)


def _term(expr: Expression) -> str:
    if isinstance(expr, Number):
        return str(expr)
    return "(%s)" % expr


class Number(Expression):
    def __init__(self, value: int):
        self.value = int(value)

    def roll(self, ctx: Context) -> int:
        return self.value

    def __repr__(self):
        return str(self.value)


class BiMathOp(Expression):
    symbol = "?"

    def op(self, lhs: int, rhs: int) -> int:
        raise NotImplementedError

    def __init__(self, lhs: Expression, rhs: Expression):
        self.lhs = lhs
        self.rhs = rhs

    def roll(self, ctx: Context) -> int:
        lhs = self.lhs.roll(ctx)
        rhs = self.rhs.roll(ctx)
        return self.op(lhs, rhs)

    def __repr__(self):
        # operators are left associative, so an equal-precedence rhs needs parens
        return "%s %s %s" % (
            _wrap(self.lhs, self.precedence),
            self.symbol,
            _wrap(self.rhs, self.precedence + 1),
        )


class Add(BiMathOp):
    symbol = "+"
    precedence = 1

    def op(self, lhs: int, rhs: int) -> int:
        return lhs + rhs


class Sub(BiMathOp):
    symbol = "-"
    precedence = 1

    def op(self, lhs: int, rhs: int) -> int:
        return lhs - rhs


class Mul(BiMathOp):
    symbol = "*"
    precedence = 2

    def op(self, lhs: int, rhs: int) -> int:
        return lhs * rhs


class Div(BiMathOp):
    symbol = "/"
    precedence = 2

    def op(self, lhs: int, rhs: int) -> int:
        if rhs == 0:
            raise DivisionByZero("division by zero in '%s'" % self)
        quotient = abs(lhs) // abs(rhs)
        return quotient if (lhs < 0) == (rhs < 0) else -quotient


class Modifier(Node):
    symbol = "?"

    def __init__(self, arg: typing.Optional[Expression] = None):
        self.arg = arg

    def __repr__(self):
        if self.arg is None:
            return self.symbol
        return "%s%s" % (self.symbol, _term(self.arg))


class Explode(Modifier):
    symbol = "!"

    def explode(self, ctx: Context, values: typing.List[int], sides: int):
        threshold = sides if self.arg is None else self.arg.roll(ctx)
        extra = 0
        i = 0
        while i < len(values):
            if values[i] >= threshold:
                if extra >= ctx.explosion_limit:
                    raise ExplosionLimitExceeded(
                        "'%s' exploded more than %s times"
                        % (self, ctx.explosion_limit)
                    )
                values.append(ctx.die(sides))
                extra += 1
            i += 1
        if extra:
            logger.debug("%s exploded %s times on d%s", self, extra, sides)
        return values


class Selection(Modifier):
    def select(self, values: typing.List[int], n: int) -> typing.List[int]:
        raise NotImplementedError

    def apply(self, ctx: Context, values: typing.List[int]) -> typing.List[int]:
        n = 1 if self.arg is None else self.arg.roll(ctx)
        n = max(0, min(n, len(values)))
        return self.select(sorted(values), n)


class KeepHigh(Selection):
    symbol = "kh"

    def select(self, values: typing.List[int], n: int) -> typing.List[int]:
        return values[len(values) - n :]


class KeepLow(Selection):
    symbol = "kl"

    def select(self, values: typing.List[int], n: int) -> typing.List[int]:
        return values[:n]


class DropHigh(Selection):
    symbol = "dh"

    def select(self, values: typing.List[int], n: int) -> typing.List[int]:
        return values[: len(values) - n]


class DropLow(Selection):
    symbol = "dl"

    def select(self, values: typing.List[int], n: int) -> typing.List[int]:
        return values[n:]


def _apply_selections(
    ctx: Context, values: typing.List[int], modifiers: typing.Iterable[Modifier]
) -> typing.List[int]:
    for modifier in modifiers:
        if isinstance(modifier, Selection):
            values = modifier.apply(ctx, values)
    return values


def _check_count(ctx: Context, count: int, expr: Expression) -> None:
    if count < 0:
        raise NegativeDiceCount("'%s' asks for %s rolls" % (expr, count))
    if count > ctx.dice_limit:
        raise DiceLimitExceeded(
            "'%s' asks for %s rolls (limit is %s)" % (expr, count, ctx.dice_limit)
        )


class Dice(Expression):
    def __init__(
        self,
        count: Expression,
        sides: Expression,
        modifiers: typing.Iterable[Modifier] = (),
    ) -> None:
        self.count = count
        self.sides = sides
        self.modifiers = tuple(modifiers)

    def roll(self, ctx: Context) -> int:
        count = self.count.roll(ctx)
        sides = self.sides.roll(ctx)
        _check_count(ctx, count, self)
        if sides < 1:
            raise ZeroSidedDie("attempted to roll a die with %s faces" % sides)

        values = [ctx.die(sides) for _ in range(count)]
        # explosions decide which values exist before anything is kept or dropped
        for modifier in self.modifiers:
            if isinstance(modifier, Explode):
                values = modifier.explode(ctx, values, sides)
        return sum(_apply_selections(ctx, values, self.modifiers))

    def __repr__(self):
        return "%sd%s%s" % (
            _term(self.count),
            _term(self.sides),
            "".join(str(m) for m in self.modifiers),
        )


class Repetition(Expression):
    def __init__(
        self,
        times: Expression,
        body: Expression,
        modifiers: typing.Iterable[Selection] = (),
    ) -> None:
        modifiers = tuple(modifiers)
        for modifier in modifiers:
            if not isinstance(modifier, Selection):
                raise ValueError("'%s' cannot modify a repetition" % modifier)
        self.times = times
        self.body = body
        self.modifiers = modifiers

    def roll(self, ctx: Context) -> int:
        times = self.times.roll(ctx)
        _check_count(ctx, times, self)
        totals = [self.body.roll(ctx) for _ in range(times)]
        return sum(_apply_selections(ctx, totals, self.modifiers))

    def __repr__(self):
        return "%s(%s)%s" % (
            _term(self.times),
            self.body,
            "".join(str(m) for m in self.modifiers),
        )


def evaluate(
    expression: Expression,
    rng: typing.Optional[RandomSource] = None,
    explosion_limit: int = DEFAULT_EXPLOSION_LIMIT,
    dice_limit: int = DEFAULT_DICE_LIMIT,
) -> RollResult:
    ctx = Context(
        rng if rng is not None else random.Random(), explosion_limit, dice_limit
    )
    value = expression.roll(ctx)
    logger.debug("%s => %s = %s", expression, format_rolls(ctx.rolls), value)
    return RollResult(value, tuple(ctx.rolls))

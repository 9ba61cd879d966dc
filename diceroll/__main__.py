import logging
import random
import typing

import typer

import diceroll.roll as roll
import diceroll.roll_parser as roll_parser
from diceroll.roll import DiceRollError
from diceroll.settings import SettingsError, load_settings

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="diceroll",
    help="Roll dice expressions such as 4d6kh3 + 2 or 3(1d6+2).",
    add_completion=False,
)


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(
            "unknown log level %s" % level_name, param_hint="--log-level"
        )
    logging.basicConfig(
        level=level, format="%(levelname)s %(name)s: %(message)s"
    )


@app.command()
def roll_(
    expression: typing.List[str] = typer.Argument(
        ...,
        help="Dice expression to roll. Quote it to protect *, ( and ) from the shell.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show individual rolls."
    ),
    seed: typing.Optional[int] = typer.Option(
        None, "--seed", "-s", help="Seed the random source for repeatable rolls."
    ),
    config: typing.Optional[str] = typer.Option(
        None, "--config", "-c", help="Settings file (default: ./settings.yaml)."
    ),
    log_level: typing.Optional[str] = typer.Option(
        None, "--log-level", help="Logging level for diagnostics on stderr."
    ),
) -> None:
    """Roll each whitespace-separated expression and print its total.

    Modifiers: ! (explode), kh/k and kl (keep highest/lowest), dh/d and dl
    (drop highest/lowest), each with an optional count such as 4d6kh3.
    N(expr) rolls expr N times.
    """
    try:
        settings = load_settings(config)
    except SettingsError as e:
        raise typer.BadParameter(str(e), param_hint="--config")
    _configure_logging(log_level or settings["log_level"])

    if seed is None:
        seed = settings["seed"]
    verbose = verbose or bool(settings["verbose"])
    rng = random.Random(seed)

    text = " ".join(expression)
    try:
        results = [
            (
                expr,
                roll.evaluate(
                    expr,
                    rng,
                    explosion_limit=settings["explosion_limit"],
                    dice_limit=settings["dice_limit"],
                ),
            )
            for expr in roll_parser.parse_all(text)
        ]
    except DiceRollError as e:
        logger.debug("failed to roll %r", text, exc_info=True)
        typer.echo("error: %s" % e.args[0], err=True)
        raise typer.Exit(1)

    for expr, result in results:
        if verbose:
            typer.echo(
                "%s => %s = %s" % (expr, roll.format_rolls(result.rolls), result.value)
            )
        else:
            typer.echo(result.value)


def main() -> None:
    app(prog_name="diceroll")


if __name__ == "__main__":
    main()

import argparse
import logging
import random
import sys
import typing

import diceroll.plot as plot
from diceroll.config import load_settings
from diceroll.errors import ConfigError, DiceRollError
from diceroll.roll_parser import RegexDice
from diceroll.tree import debug
from diceroll.visitor import DiceRollingVisitor


def _argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diceroll",
        description="Roll dice notation such as 3d6!>5, 2d8+2<6 or -2d6+2 asc.",
    )
    parser.add_argument("expressions", nargs="+", metavar="EXPR")
    parser.add_argument("--settings", help="YAML file overriding the default settings")
    parser.add_argument("--seed", type=int, help="seed the dice for repeatable rolls")
    parser.add_argument(
        "--debug", action="store_true", help="print every intermediate result"
    )
    parser.add_argument("--plot", metavar="FILE", help="write a PNG chart of the rolls")
    parser.add_argument(
        "--trials", type=int, default=10000, help="rolls per expression for --plot"
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: typing.List[str] = sys.argv) -> int:
    args = _argument_parser().parse_args(argv[1:])

    try:
        settings = load_settings(args.settings)
    except ConfigError as e:
        print("error: %s" % e, file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)

    random_source = None
    if args.seed is not None:
        rng = random.Random(args.seed)
        random_source = lambda faces: rng.randint(1, faces)

    if args.plot:
        try:
            image = plot.plot(args.expressions, args.trials, random_source, settings)
        except DiceRollError as e:
            print("error: %s" % e, file=sys.stderr)
            return 1
        with open(args.plot, "wb") as f:
            f.write(image)
        print("wrote %s" % args.plot)
        return 0

    parser = RegexDice(settings)
    visitor = DiceRollingVisitor(random_source, settings)
    status = 0
    for expression in args.expressions:
        try:
            result = visitor.visit(parser.parse(expression))
        except DiceRollError as e:
            print("error: %s" % e, file=sys.stderr)
            status = 1
            continue

        if args.debug:
            print(debug(result), end="")
        else:
            print("%s = %s" % (expression, result.value))
    return status


if __name__ == "__main__":
    sys.exit(main())

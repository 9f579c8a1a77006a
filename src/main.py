import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from config.config import LEVEL_ORDER, Config
from puzzle import ExpressionParser, PuzzleSolver
from utils.helpers import format_result


def build_parser(default_level: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve an IQ180 number puzzle.")
    parser.add_argument('numbers', nargs='+', type=int, help="numbers to combine, each used once")
    parser.add_argument('-t', '--target', type=int, required=True, help="number to reach")
    parser.add_argument('-l', '--level', choices=LEVEL_ORDER, default=default_level,
                        help="difficulty level (default: %(default)s); levels 2 and 3 with "
                             "five or more numbers can take minutes")
    parser.add_argument('--check', metavar='EXPR', help="check an answer instead of solving")
    parser.add_argument('--json', action='store_true', help="print the raw result as JSON")
    return parser


def main(argv=None) -> int:
    # Load environment variables
    load_dotenv()

    config = Config()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    args = build_parser(config.default_level).parse_args(argv)
    if any(n < 0 for n in args.numbers):
        print("Numbers must be non-negative", file=sys.stderr)
        return 2

    if args.check:
        checked = ExpressionParser().parse_and_validate(args.check, args.numbers)
        if not checked['valid']:
            print(f"Invalid: {checked['error']}")
            return 1
        distance = abs(checked['result'] - args.target)
        print(f"{args.check} = {checked['result']}" + ("" if distance == 0 else f" (off by {distance})"))
        return 0 if distance == 0 else 1

    result = PuzzleSolver(config.solver).solve(args.numbers, args.target, args.level)
    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_result(result, args.target))
    return 0 if result.exact_solutions else 1


if __name__ == "__main__":
    sys.exit(main())

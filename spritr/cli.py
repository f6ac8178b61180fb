# spritr/cli.py
from __future__ import annotations
import argparse
import logging
import random
import sys
from typing import Optional, Sequence, Tuple

from app_config import APP_NAME, CLI_EXAMPLES, CLI_NAME, DEFAULTS, version_string
from spritr.core.compositor import Compositor
from spritr.core.config import SpriteConfig, load_categories
from spritr.core.errors import SpritrError
from spritr.core.exporter import Exporter
from spritr.core.grid import build_sequence
from spritr.core.layers import LayerStore, read_layer_files
from spritr.core.logging import get_logger, setup_logging
from spritr.core.randomizer import LayerSelector

_log = get_logger(__name__)


def _layer_arg(value: str) -> Tuple[str, str]:
    category, sep, path = value.partition("=")
    if not sep or not category or not path:
        raise argparse.ArgumentTypeError(f"expected CATEGORY=PATH, got {value!r}")
    return category, path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=CLI_NAME,
        description=f"{APP_NAME} sprite layer compositor",
        epilog="examples:\n" + CLI_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {version_string()}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sprite = DEFAULTS["sprite"]
    compose = sub.add_parser("compose", help="composite layers into one still image")
    compose.add_argument("--layer", dest="layers", action="append", type=_layer_arg, default=[],
                         metavar="CATEGORY=PATH", help="layer file, painted in the given order")
    compose.add_argument("--cell-size", type=int, default=sprite["cell_size"])
    compose.add_argument("--name", default=sprite["sprite_name"], help="output file stem")
    compose.add_argument("--out", default=DEFAULTS["export"]["directory"], help="output directory")
    compose.add_argument("--randomize", action="store_true", help="pick one layer per category")
    compose.add_argument("--seed", type=int, default=None)

    frames = sub.add_parser("frames", help="print the playback frame order")
    frames.add_argument("--columns", type=int, required=True)
    frames.add_argument("--rows", type=int, required=True)
    return parser


def cmd_compose(args: argparse.Namespace) -> int:
    config = SpriteConfig.from_defaults({"cell_size": args.cell_size, "sprite_name": args.name})
    categories = load_categories()
    known = {c.name for c in categories}

    store = LayerStore()
    for category, path in args.layers:
        if category not in known:
            _log.warning("Unknown category %r for %s (known: %s)", category, path, ", ".join(sorted(known)))
        files = read_layer_files([path])
        if not files:
            raise SpritrError(f"not a supported image file: {path}")
        store.add_files(files, category)

    if args.randomize:
        LayerSelector(categories, random.Random(args.seed)).randomize(store)

    compositor = Compositor(max_workers=DEFAULTS["compositor"]["decode_workers"],
                            default_size=(config.cell_size, config.cell_size))
    result = Exporter(compositor, DEFAULTS["export"]["format"]).export(store, config.sprite_name)
    print(result.write(args.out))
    return 0


def cmd_frames(args: argparse.Namespace) -> int:
    for frame in build_sequence(args.columns, args.rows):
        print(f"{frame.x},{frame.y}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        root = logging.getLogger()
        root.setLevel(logging.DEBUG)
        for h in root.handlers:
            h.setLevel(logging.DEBUG)
    handlers = {"compose": cmd_compose, "frames": cmd_frames}
    try:
        return handlers[args.command](args)
    except (SpritrError, OSError) as ex:
        print(f"{CLI_NAME}: error: {ex}", file=sys.stderr)
        return 1


def run() -> int:
    """Console-script entry: console logging only, no log file."""
    setup_logging(level=logging.WARNING, to_file=False)
    return main()


if __name__ == "__main__":
    raise SystemExit(run())

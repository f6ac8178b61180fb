# spritr entry point
from __future__ import annotations
import logging
import sys
from app_config import ensure_app_dirs, banner
from spritr.core.logging import setup_logging
from spritr.cli import main as cli_main


def main() -> int:
    ensure_app_dirs()
    logger = setup_logging(level=logging.INFO)
    logger.info(banner())
    return cli_main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from qwacks.commands.app import run


def main(argv: list[str] | None = None, *, runner=run) -> int:
    p = argparse.ArgumentParser(description="Qwacks remote command dispatcher")
    p.add_argument("--handler-module", required=True, help="Python module exposing `register_commands(registry)`")
    p.add_argument("--input", required=True, type=Path, help="File of newline-delimited envelopes, or - for stdin")
    p.add_argument("--config", default=None, type=Path, help="Path to dispatcher_config.json")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = p.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return runner(handler_module=args.handler_module, input_path=args.input, config_path=args.config)


if __name__ == "__main__":
    raise SystemExit(main())

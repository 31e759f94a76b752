from __future__ import annotations

import argparse
from pathlib import Path

import uvicorn

from qwacks.dashboard.app import create_app


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="Qwacks dispatch report dashboard")
    p.add_argument("--dispatch-log", required=True, type=Path, help="Path to dispatch.jsonl")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", default=8000, type=int)
    args = p.parse_args(argv)

    app = create_app(dispatch_log=args.dispatch_log)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()

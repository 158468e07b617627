from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path

from invitekit.config import load_config

_log = logging.getLogger("main")


def _install_exception_logging() -> None:
    """Log uncaught exceptions before the interpreter prints them."""

    def _log_uncaught_exception(exc_type, exc_value, exc_tb) -> None:
        try:
            message = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
            _log.error("uncaught exception\n%s", message.rstrip())
        except Exception:
            pass
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _log_uncaught_exception


def main() -> None:
    parser = argparse.ArgumentParser(description="Launch the InviteKit HTTP server.")
    parser.add_argument("--root", type=Path, default=None, help="Templates root directory.")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="Config YAML path.")
    args = parser.parse_args(sys.argv[1:])

    cfg = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, str(cfg.get("log_level") or "info").upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    _install_exception_logging()
    _log.info("startup argv=%s", sys.argv[1:])

    if args.root is not None:
        cfg["templates_dir"] = str(args.root.resolve(strict=False))

    try:
        import uvicorn

        from invitekit.api import create_app
    except Exception as exc:
        _log.error("server import failed: %s", exc)
        raise SystemExit(f"HTTP server is unavailable: {exc}") from exc

    host = args.host or str(cfg["host"])
    port = int(args.port or cfg["port"])
    _log.info("serving %s on %s:%s", cfg["templates_dir"], host, port)
    uvicorn.run(create_app(cfg), host=host, port=port)
    _log.info("server stopped")


if __name__ == "__main__":
    main()

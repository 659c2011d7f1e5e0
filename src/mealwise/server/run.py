"""Run the Mealwise API under uvicorn."""

from __future__ import annotations

import os

import uvicorn

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def _parse_port(value: str | None) -> int:
    if not value:
        return DEFAULT_PORT
    try:
        port = int(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid MEALWISE_SERVER_PORT '{value}': {exc}") from exc
    if not 0 < port < 65536:
        raise SystemExit("MEALWISE_SERVER_PORT must be between 1 and 65535.")
    return port


def main() -> None:
    """Serve ``mealwise.server.app:app``; RELOAD=1 enables auto-reload for development."""

    host = os.environ.get("MEALWISE_SERVER_HOST", DEFAULT_HOST)
    port = _parse_port(os.environ.get("MEALWISE_SERVER_PORT"))
    reload_enabled = os.environ.get("RELOAD") == "1"

    uvicorn.run(
        "mealwise.server.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()

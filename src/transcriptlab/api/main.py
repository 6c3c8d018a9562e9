from __future__ import annotations

import os

from transcriptlab.api.app import app  # noqa: F401


def run(host: str | None = None, port: int | None = None) -> None:
    """
    Programmatic runner:
    python -m transcriptlab.api.main
    """
    import uvicorn  # local import to keep import graph light

    host = host or os.getenv("TRANSCRIPTLAB_API_HOST", "0.0.0.0")
    port = port or int(os.getenv("TRANSCRIPTLAB_API_PORT", "8000"))

    uvicorn.run("transcriptlab.api.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    run()

"""Run the service with uvicorn: `python -m response_cms`."""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "response_cms.main:create_app",
        factory=True,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()

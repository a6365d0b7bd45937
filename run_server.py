"""Launch the video catalog FastAPI server."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

import uvicorn
from dotenv import load_dotenv

from video_catalog.catalog import CatalogConfig
from video_catalog.server import create_app


ENV_FILES = (".env.local", ".env")


def load_env_files(filenames: Iterable[str | Path] = ENV_FILES) -> list[Path]:
    """Load catalog settings from dotenv files, earliest file winning.

    Variables already set in the process environment are never overridden.
    Returns the files that were actually read.
    """

    loaded = [Path(name) for name in filenames if Path(name).is_file()]
    for env_path in loaded:
        load_dotenv(env_path, override=False)
    return loaded


def main() -> None:
    load_env_files()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", "8000"))
    app = create_app(CatalogConfig.from_env())
    uvicorn.run(app, host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":
    main()

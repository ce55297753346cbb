"""Create the gallery tables and indexes if they do not exist yet."""

from __future__ import annotations

import asyncio
import logging

from picker_gallery.core.config import settings
from picker_gallery.db.session import init_models

LOG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"


def main() -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, force=True)
    asyncio.run(init_models())


if __name__ == "__main__":
    main()

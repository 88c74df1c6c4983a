import logging

import uvicorn

from .config import settings

logger = logging.getLogger("tinylink")


def main():
    from .main import app

    logger.info(f"TinyLink running on port {settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()

"""
MathDash — Entry point.

Serve the dashboard API with uvicorn.
"""

import uvicorn

from solver import config
from solver.logging_config import setup_logging


def main() -> None:
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)
    uvicorn.run("backend.app.main:app", host=config.HOST, port=config.PORT,
                log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()

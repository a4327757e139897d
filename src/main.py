"""Runs the form service with uvicorn: `python -m src.main`."""

import logging

import uvicorn

from src.app import create_app
from src.shared.config import load_config


def main():
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = create_app(config)
    logging.info(f"Server running on http://localhost:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()

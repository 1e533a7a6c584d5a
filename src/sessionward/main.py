"""Application entry point for the SessionWard server."""

from sessionward.app import App
from sessionward.config import Config
from sessionward.logging import setup_logging
from sessionward.web.runner import run_server


def main() -> None:
    config = Config()  # type: ignore[call-arg]
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()

"""Uvicorn server runner."""

import copy

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from sessionward.app import App
from sessionward.config import Config
from sessionward.web.server import create_fastapi_app


def run_server(app: App, config: Config) -> None:
    """Serve the API under uvicorn, access log included."""
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s %(client_addr)s "%(request_line)s" %(status_code)s'
    log_config["loggers"]["uvicorn"]["level"] = "DEBUG" if config.debug else "INFO"

    uvicorn.run(
        create_fastapi_app(app, config),
        host=config.host,
        port=config.port,
        log_config=log_config,
        access_log=True,
        server_header=False,
    )

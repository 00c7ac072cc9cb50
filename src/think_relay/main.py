"""Application entrypoint - aiohttp server relaying reasoning model streams."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog
from aiohttp.web import Application, run_app

from think_relay.api import register_routes
from think_relay.config import Settings, get_settings
from think_relay.llm.client import ChatClient


def _add_handler(handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logging.root.addHandler(handler)


def configure_logging(
    log_level: str = "INFO",
    log_file: str = "",
    log_file_max_bytes: int = 10_485_760,
    log_file_backup_count: int = 5,
) -> None:
    """Route structlog events through stdlib logging.

    Events go to the console, and also to a rotating file when ``log_file``
    is set. With a file configured every handler receives JSON lines;
    otherwise the console gets the structlog dev renderer.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.root.setLevel(level)
    logging.root.handlers.clear()

    _add_handler(logging.StreamHandler(), level)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _add_handler(
            RotatingFileHandler(
                filename=log_file,
                maxBytes=log_file_max_bytes,
                backupCount=log_file_backup_count,
                encoding="utf-8",
            ),
            level,
        )

    renderer = structlog.processors.JSONRenderer() if log_file else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


def create_app(
    settings: Settings | None = None,
    chat_client: ChatClient | None = None,
) -> Application:
    """Create and configure the aiohttp application.

    Args:
        settings: Application settings (loaded from the environment if None).
        chat_client: Inference client. Built from settings when omitted and
            the inference API is configured; otherwise chat routes answer 503.
    """
    settings = settings or get_settings()

    if chat_client is None and settings.inference_enabled:
        chat_client = ChatClient(settings)
        logger.info(
            "chat_client_initialized",
            url=settings.inference_api_url,
            model=settings.inference_model_name,
        )
    elif chat_client is None:
        logger.info(
            "chat_client_disabled",
            reason="INFERENCE_API_URL or INFERENCE_API_KEY not set",
        )

    app = Application()
    app["settings"] = settings
    app["chat_client"] = chat_client
    register_routes(app)

    return app


def main() -> None:
    """Run the relay server."""
    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        log_file_max_bytes=settings.log_file_max_bytes,
        log_file_backup_count=settings.log_file_backup_count,
    )

    logger.info(
        "starting_relay_server",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        think_start_tag=settings.think_start_tag,
        think_end_tag=settings.think_end_tag,
    )

    app = create_app(settings)
    run_app(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()

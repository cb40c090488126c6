"""
telegram_bot.py - runs the context router on Telegram with a health-check server

- polling through python-telegram-bot
- HTTP server for /health and /metrics
- graceful shutdown on SIGINT / SIGTERM
"""

import os
import sys
import signal
import asyncio
import logging
import structlog

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from telegram.ext import Application
from dotenv import load_dotenv
from aiohttp import web

from bot.example_app import register_example_handlers
from bot.handlers import setup_handlers
from bot.transport import TelegramTransport
from config.bot_config import BotConfigManager
from dialog.dispatcher import Dispatcher
from utils.metrics import DispatchMetrics, metrics_handler

logger = structlog.get_logger("context_router.telegram_bot")


def configure_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


async def healthcheck_handler(request):
    return web.Response(text="OK")


async def start_healthcheck_server(port, metrics=None):
    app = web.Application()
    app.router.add_get('/health', healthcheck_handler)
    if metrics is not None:
        app["metrics"] = metrics
        app.router.add_get('/metrics', metrics_handler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, '0.0.0.0', port)
    await site.start()
    logger.info("healthcheck_started", port=port)
    return runner


def build_dispatcher(application, config, metrics=None) -> Dispatcher:
    transport = TelegramTransport(application, parse_mode=config.parse_mode)
    dispatcher = Dispatcher(transport, metrics=metrics, bot_username=config.bot_username)
    dispatcher.set_unknown_user_reply(config.unknown_user_reply)
    dispatcher.set_already_known_reply(config.already_known_reply)
    return dispatcher


async def main(setup=register_example_handlers):
    load_dotenv()
    config_manager = BotConfigManager()
    config = config_manager.config
    configure_logging(config.debug)

    token = config_manager.get_token()
    if not token:
        logger.error("token_missing", env=config.token_env)
        raise SystemExit(1)

    application = Application.builder().token(token).build()
    metrics = DispatchMetrics() if config.metrics_enabled else None
    dispatcher = build_dispatcher(application, config, metrics)
    setup(dispatcher)
    setup_handlers(application, dispatcher)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    healthcheck_runner = await start_healthcheck_server(config.healthcheck_port, metrics)
    try:
        async with application:
            await application.start()
            if config.announce_commands:
                dispatcher.announce_commands()
            await application.updater.start_polling()
            logger.info("polling_start")
            await stop_event.wait()
            logger.info("polling_stop")
            await application.updater.stop()
            await application.stop()
    finally:
        await healthcheck_runner.cleanup()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()

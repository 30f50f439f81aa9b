import logging
import logging.handlers

from flask import current_app

logger = logging.getLogger("simple_ledger")

LOG_FORMAT = '[%(asctime)s] p%(process)s {%(pathname)s:%(lineno)d} %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%m-%d %H:%M:%S'


def logging_initiate(config):
    """Attach stream (and optionally SMTP) handlers to the ledger logger."""
    logger.setLevel(config.get("LOG_LEVEL", "DEBUG"))

    # create_app may run more than once per process (tests)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    format = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.DEBUG)
    stream_handler.setFormatter(format)
    logger.addHandler(stream_handler)

    mail_host = config.get("LOG_MAIL_HOST")
    if mail_host:
        logger.debug('Attempting to start SMTP logging')
        smtp_handler = logging.handlers.SMTPHandler(
            mailhost=(mail_host, config.get("LOG_MAIL_PORT", 587)),
            fromaddr=config["LOG_MAIL_FROM"],
            toaddrs=config["LOG_MAIL_TO"],
            subject="Simple Ledger Logging",
            credentials=config.get("LOG_MAIL_CREDENTIALS"),
            secure=(),
        )
        smtp_handler.setLevel(logging.INFO)
        smtp_handler.setFormatter(format)
        logger.addHandler(smtp_handler)

    logger.debug('Simple Ledger: logging started')


def get_auth_client():
    return current_app.extensions["auth_client"]


def currency_symbol():
    return current_app.config.get("CURRENCY_SYMBOL", "₹")


import sys
import logging


this = sys.modules[__name__]

LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL
}

COLORS = {
    logging.DEBUG: '37',
    logging.INFO: '36',
    logging.WARNING: '33',
    logging.ERROR: '31',
    logging.CRITICAL: '41'
}

LOG_FORMAT = '[%(asctime)s][%(name)s][%(levelname)s]: %(message)s'

logger = logging.getLogger('tunprov')


class TerminalFormatter(logging.Formatter):
    """
    Colors the level name only when writing to a terminal
    """

    def __init__(self, stream):
        super().__init__(LOG_FORMAT)
        self._colored = hasattr(stream, 'isatty') and stream.isatty()

    def formatMessage(self, record: logging.LogRecord) -> str:
        if not self._colored:
            return super().formatMessage(record)

        colored = logging.makeLogRecord(dict(
            record.__dict__, levelname='\033[%sm%s\033[0m' % (COLORS.get(record.levelno, '37'), record.levelname)
        ))

        return super().formatMessage(colored)


def setup_dummy_logger():
    dummy = logging.getLogger('tunprov')

    for handler in dummy.handlers.copy():
        dummy.removeHandler(handler)

    dummy.addHandler(logging.NullHandler())
    this.logger = dummy


def setup_logger(path: str, level: str):
    """ Creates a logger instance with proper handlers configured """

    configured = logging.getLogger('tunprov')
    level = LEVELS.get(level, logging.INFO)

    for handler in configured.handlers.copy():
        configured.removeHandler(handler)

    handlers = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(TerminalFormatter(sys.stdout))

    if path:
        handlers.append(logging.FileHandler(path, 'a+'))
        handlers[1].setFormatter(logging.Formatter(LOG_FORMAT))

    for handler in handlers:
        handler.setLevel(level)
        configured.addHandler(handler)

    configured.setLevel(level)
    configured.propagate = False

    this.logger = configured


class Logger:
    @staticmethod
    def debug(msg: str):
        this.logger.debug(msg)

    @staticmethod
    def info(msg: str):
        this.logger.info(msg)

    @staticmethod
    def warning(msg: str):
        this.logger.warning(msg)

    @staticmethod
    def error(msg: str):
        this.logger.error(msg)

# relay/core/logging.py
import logging
import os
import sys
from datetime import datetime


def _level_from_env() -> int:
    """Read RELAY_LOG_LEVEL as a level name or number, INFO otherwise."""
    raw = os.environ.get('RELAY_LOG_LEVEL', '').strip()
    if not raw:
        return logging.INFO
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.INFO


# Module-level default log level, can be changed by set_default_level()
_default_level: int = _level_from_env()


class ColoredFormatter(logging.Formatter):
    """Colored formatter for relay logging"""

    COLORS = {
        'RESET': '\033[0m',
        'LIGHT_BLUE': '\033[94m',
        'WHITE': '\033[97m',
        'GRAY': '\033[90m',
        'GREEN': '\033[92m',
        'YELLOW': '\033[93m',
        'RED': '\033[91m',
        'BRIGHT_RED': '\033[1;91m',
    }

    LEVEL_COLORS = {
        'DEBUG': COLORS['GRAY'],
        'INFO': COLORS['GREEN'],
        'WARNING': COLORS['YELLOW'],
        'ERROR': COLORS['RED'],
        'CRITICAL': COLORS['BRIGHT_RED'],
    }

    def format(self, record: logging.LogRecord) -> str:
        time_str = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')

        # 'relay.engine.unlock' -> 'unlock'
        component = record.name.rsplit('.', 1)[-1]

        # [validate] is 10 chars, [CRITICAL] is 10 chars
        component_padded = f'[{component}]'.ljust(12)
        level_padded = f'[{record.levelname}]'.ljust(11)

        level_color = self.LEVEL_COLORS.get(record.levelname, self.COLORS['WHITE'])
        reset = self.COLORS['RESET']
        white = self.COLORS['WHITE']

        formatted = (
            f"{self.COLORS['LIGHT_BLUE']}[{time_str}]{reset} "
            f'{white}{component_padded}{reset}'
            f'{level_color}{level_padded}{reset}'
            f'{white}{record.getMessage()}{reset}'
        )

        if record.exc_info:
            formatted += '\n' + self.formatException(record.exc_info)

        return formatted


def set_default_level(level: int) -> None:
    """Set the default log level for new loggers."""
    global _default_level
    _default_level = level


def get_logger(component_name: str) -> logging.Logger:
    """Get a logger for the specified component."""
    logger = logging.getLogger(f'relay.{component_name}')

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColoredFormatter())
        handler.setLevel(_default_level)
        logger.addHandler(handler)
        logger.setLevel(_default_level)

        # Prevent duplicate logs from parent loggers
        logger.propagate = False

    return logger

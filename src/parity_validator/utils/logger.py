"""Logging setup for the parity validator."""

import logging
import logging.config
import yaml
from pathlib import Path
from typing import List, Optional

LOGGER_NAME = 'parity_validator'


def _find_logging_config() -> Optional[str]:
    possible_paths = [
        Path(__file__).parent.parent.parent.parent / 'config' / 'logging.yaml',
        Path('config/logging.yaml'),
    ]
    for path in possible_paths:
        if path.exists():
            return str(path)
    return None


def console_handlers(logger: logging.Logger) -> List[logging.Handler]:
    """Stream handlers of ``logger`` that write to a terminal, not to a file."""
    return [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]


def setup_logging(
    config_path: Optional[str] = None,
    default_level: int = logging.INFO,
    verbose: bool = False
) -> logging.Logger:
    """
    Configure the ``parity_validator`` logger.

    The YAML config keeps the console quiet (WARNING) and sends everything
    to the log file. ``verbose`` lowers the console handlers to DEBUG so the
    phase-by-phase progress of a run is shown on stderr.

    Args:
        config_path: Path to logging YAML config (default: config/logging.yaml if present)
        default_level: Level for basicConfig when no YAML config is found
        verbose: Show DEBUG output on the console

    Returns:
        The package logger
    """
    config_path = config_path or _find_logging_config()
    logger = logging.getLogger(LOGGER_NAME)

    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)

        # File handlers in the YAML config write under logs/
        Path('logs').mkdir(exist_ok=True)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(
            level=logging.DEBUG if verbose else default_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    if verbose:
        logger.setLevel(logging.DEBUG)
        for handler in console_handlers(logger):
            handler.setLevel(logging.DEBUG)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(f'{LOGGER_NAME}.{name}')

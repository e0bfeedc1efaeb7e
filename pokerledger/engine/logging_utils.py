import logging
import os

def setup_logger(name=None,
    log_file='logs/pokerledger.log',
    level: int = logging.INFO,
    mode='a',
    console_handler = True,
    formatter_input: str = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
) -> logging.Logger:
    """Configure a logger with an optional console handler and a file handler."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear() # avoid duplicate handlers

    # Ensure the logs directory exists:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(
        formatter_input
    )

    if console_handler:
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        ch.setLevel(level)
        logger.addHandler(ch)

    fh = logging.FileHandler(log_file, mode=mode)
    fh.setFormatter(formatter)
    fh.setLevel(level)
    logger.addHandler(fh)

    return logger

import logging

from .money import DEFAULT_CURRENCY_SYMBOL, Amount, fmt_money


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.level:
        logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('[%(levelname)s] %(name)s: %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def format_money_for_logging(amount: Amount, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """
    Format an amount for logging display.

    Args:
        amount: Amount in currency units

    Returns:
        Formatted string like "Rs. 1,250"
    """
    return fmt_money(amount, symbol)

import logging


def configure_logging(level: str = "INFO") -> None:
    """
    Install a single log format for the whole service.

    Unknown level names fall back to INFO.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)-8s - [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

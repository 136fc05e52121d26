import logging
from typing import Union

LOG_FORMAT = "[%(levelname)s] %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Install a stderr handler once; later calls only adjust the level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)

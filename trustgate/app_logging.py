"""JSON log output for the authorizer service."""

import logging
from typing import Union

from pythonjsonlogger import jsonlogger

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def setup_logger(level: Union[int, str] = logging.INFO) -> None:
    """
    Attach a JSON handler to the root logger.

    Calling this more than once (e.g. once per app created in tests) does not
    add more handlers; it only updates the level.
    """
    root = logging.getLogger()
    root.setLevel(level)
    if any(isinstance(handler.formatter, jsonlogger.JsonFormatter)
           for handler in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(
        LOG_FORMAT, rename_fields={'levelname': 'level',
                                   'asctime': 'timestamp'}
    ))
    root.addHandler(handler)

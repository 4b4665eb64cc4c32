import logging

_FORMAT = "[%(asctime)s] [%(name)s] %(message)s"
_HANDLER_NAME = "minutes_stream"


def configure_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    for handler in root_logger.handlers:
        if handler.name == _HANDLER_NAME:
            return
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(_FORMAT, "%H:%M:%S"))
    stream_handler.name = _HANDLER_NAME
    root_logger.addHandler(stream_handler)

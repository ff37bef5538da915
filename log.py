import logging
import sys
from middleware import RequestIDMiddleware

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(request_id)s] - %(name)s - %(message)s"


class ContextualFilter(logging.Filter):
    """Stamps every record with the ID of the request being served ("N/A" outside one)."""
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = RequestIDMiddleware.request_id_context().get()
        return True


def _build_handlers(log_filename: str | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    # An empty LOG_FILENAME keeps logs on stdout only (e.g. inside containers)
    if log_filename:
        handlers.append(logging.FileHandler(log_filename, mode="a"))
    return handlers


def setup_logging(log_level: str = "INFO", log_filename: str | None = "evaluation_service.log"):
    request_filter = ContextualFilter()
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = _build_handlers(log_filename)
    for handler in handlers:
        handler.addFilter(request_filter)
        handler.setFormatter(formatter)

    logging.basicConfig(level=logging.getLevelName(log_level.upper()), handlers=handlers)

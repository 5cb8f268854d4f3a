import logging
import json

# Attributes passed through `extra=` by the primitive adapter and the benchmark
HARNESS_FIELDS = ("status", "argon2_type", "m_cost", "threads")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, carrying the harness fields when a record has them."""

    def format(self, record):
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in HARNESS_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_json_logging(level=logging.INFO):
    logger = logging.getLogger()
    logger.setLevel(level)
    if any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
        return logger

    # StreamHandler writes to stderr; stdout is reserved for the hash report
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

    return logger


def configure_logging(level: str = "WARNING", json_lines: bool = False):
    """Install the JSON handler or a plain stderr handler, once per process."""
    numeric = getattr(logging, level.upper(), logging.WARNING)
    if json_lines:
        return configure_json_logging(numeric)
    logging.basicConfig(level=numeric, format="%(levelname)s %(name)s: %(message)s")
    return logging.getLogger()

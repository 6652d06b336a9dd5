"""Logging setup with a PII-scrubbing filter.

Log lines in this service carry category labels, rejection reasons,
offsets and lengths.  Document text and span values must never reach a
handler, so the filter masks anything shaped like a detectable value and
the contents of ``value=`` / ``text=`` / ``prompt=`` fields.  Offsets and
counts are short digit runs and are left alone.
"""
import logging
import logging.config
import re

# Free-text shapes of detectable values, checked in order.
PII_PATTERNS: dict[str, re.Pattern[str]] = {
    "EMAIL": re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"),
    "SSN": re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),
    "PAN": re.compile(r"\b[A-Z]{5}\d{4}[A-Z]\b"),
    "CARD": re.compile(r"\b(?:\d[ -]*?){13,16}\b"),
    "AADHAAR": re.compile(r"\b\d{4}[ -]?\d{4}[ -]?\d{4}\b"),
    "PHONE": re.compile(r"(?:\+\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]\d{3}[-.\s]?\d{4}\b"),
}

SENSITIVE_FIELDS = re.compile(r"(?i)\b((?:value|text|prompt)\s*[=:]\s*)(\S+)")


class PIISafeFilter(logging.Filter):
    """Mask span values and document text in log records."""

    def _sanitize(self, value: object) -> object:
        if not isinstance(value, str):
            return value

        redacted = SENSITIVE_FIELDS.sub(r"\1[REDACTED]", value)
        for category, pattern in PII_PATTERNS.items():
            redacted = pattern.sub(f"[{category}]", redacted)
        return redacted

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._sanitize(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(self._sanitize(item) for item in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._sanitize(value) for key, value in record.args.items()}

        return True


def setup_logging() -> None:
    """Configure the root logger from settings.

    ``LOG_PII_SAFE=false`` drops the filter, for local debugging against
    synthetic documents only.
    """
    from pii_protector.core.settings import get_settings

    settings = get_settings()
    console_filters = ["pii_safe"] if settings.log_pii_safe else []
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "pii_safe": {
                    "()": "pii_protector.core.logging.PIISafeFilter",
                }
            },
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": console_filters,
                }
            },
            "loggers": {
                "": {
                    "handlers": ["console"],
                    "level": settings.log_level.upper(),
                },
                "uvicorn.access": {
                    "handlers": ["console"],
                    "level": "WARNING",
                    "propagate": False,
                },
                "httpx": {
                    "handlers": ["console"],
                    "level": "WARNING",
                    "propagate": False,
                },
            },
        }
    )

"""JSON structured logging with mandatory fields and PII redaction."""
import json
import logging
import re
import sys
import threading
from datetime import datetime, timezone

from backend.core.config import settings

# Thread-local storage for context
_context = threading.local()

_RESERVED_ATTRS = frozenset(
    (
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
        'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
        'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
        'processName', 'process', 'message', 'taskName',
    )
)


class JSONFormatter(logging.Formatter):
    """JSON formatter with mandatory fields and PII redaction."""

    def __init__(self):
        super().__init__()
        # PII patterns
        self.iban_pattern = re.compile(r'([A-Z]{2}\d{2}[A-Z0-9]{1,30})')
        self.email_pattern = re.compile(r'(\b\S+@\S+\.\S+\b)')
        # Romanian CNP: 13 digits, first digit 1-9
        self.cnp_pattern = re.compile(r'\b([1-9]\d{12})\b')
        self.phone_pattern = re.compile(r'(\+?\d[\d \-/]{6,})')

    def _redact_pii(self, text: str) -> str:
        """Redact PII from text."""
        if not isinstance(text, str):
            return text

        text = self.iban_pattern.sub(self._mask_iban, text)
        text = self.email_pattern.sub(self._mask_email, text)
        text = self.cnp_pattern.sub(self._mask_cnp, text)
        text = self.phone_pattern.sub(self._mask_phone, text)

        return text

    def _mask_iban(self, match) -> str:
        """Mask IBAN: show first 2 chars, mask the rest."""
        iban = match.group(1)
        if len(iban) <= 4:
            return "**" + "*" * (len(iban) - 2)
        return iban[:2] + "**" + "*" * (len(iban) - 4)

    def _mask_email(self, match) -> str:
        """Mask email: show first char of user, mask domain."""
        email = match.group(1)
        if "@" not in email:
            return email
        user, domain = email.split("@", 1)
        if len(user) <= 1:
            masked_user = "*"
        else:
            masked_user = user[0] + "*" * (len(user) - 1)
        return f"{masked_user}@{domain}"

    def _mask_cnp(self, match) -> str:
        return "CNP-" + "*" * 9

    def _mask_phone(self, match) -> str:
        """Mask phone: show first 2 chars, mask the rest."""
        phone = match.group(1)
        if len(phone) <= 2:
            return "*" * len(phone)
        return phone[:2] + "*" * (len(phone) - 2)

    def format(self, record):
        """Format log record as JSON with mandatory fields and PII redaction."""
        trace_id = getattr(_context, 'trace_id', None) or 'unknown'

        message = record.getMessage()
        redacted_message = self._redact_pii(message)

        log_entry = {
            'trace_id': trace_id,
            'logger': record.name,
            'level': record.levelname.lower(),
            'msg': redacted_message,
            'ts_utc': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }

        if record.exc_info:
            log_entry['exc_info'] = self._redact_pii(self.formatException(record.exc_info))

        # Extra fields passed via ``extra=``
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if isinstance(value, str):
                value = self._redact_pii(value)
            log_entry[key] = value

        return json.dumps(log_entry, default=str)


def set_trace_id(trace_id: str) -> None:
    """Set trace ID for current thread context."""
    _context.trace_id = trace_id


def init_logging() -> None:
    """Initialize JSON logging with mandatory fields."""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

# FILE: assignment_hub/governance/redaction.py
"""
PII redaction for captured model prompts

Prompts embed student profiles and answers, so anything written to the
provider I/O log passes through redact_pii first.
"""
import re
import logging
from typing import List, Tuple, Pattern

logger = logging.getLogger(__name__)


PII_PATTERNS: List[Tuple[str, Pattern[str]]] = [
    ("[EMAIL]", re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')),
    ("[PHONE]", re.compile(r'(?<!\d)(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)')),
    ("[DOB]", re.compile(r'\b\d{4}-\d{2}-\d{2}\b')),
]


def redact_pii(text: str) -> str:
    """Replace emails, phone numbers and dates of birth with placeholders"""
    if not text:
        return text

    redacted = text
    for placeholder, pattern in PII_PATTERNS:
        redacted = pattern.sub(placeholder, redacted)

    if redacted != text:
        logger.debug("Redacted PII from captured prompt")
    return redacted

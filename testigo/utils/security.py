"""Security helpers: PII masking for logs and the admin token check."""
import hmac
import re
from typing import Optional


def mask_pii(text: str) -> str:
    # phone numbers and e-mail addresses never reach the log
    masked = re.sub(r"\+?\d[\d\s/-]{7,}\d", "[REDACTED]", text or "")
    masked = re.sub(r"[\w.+-]+@[\w-]+\.[\w.-]+", "[EMAIL]", masked)
    return masked


def check_admin_token(provided: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time comparison of the shared admin secret."""
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))

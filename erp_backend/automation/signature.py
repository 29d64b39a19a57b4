# automation/signature.py

"""
Webhook signature: hex HMAC-SHA512 of the raw request body, keyed with
AUTOMATION["WEBHOOK_SECRET"], sent in the X-Automation-Signature header.
"""

from __future__ import annotations

import hashlib
import hmac

from backend.conf import automation_setting

SIGNATURE_HEADER = "X-Automation-Signature"


def _secret() -> bytes:
    return (automation_setting("WEBHOOK_SECRET") or "").strip().encode("utf-8")


def sign_payload(raw_body: bytes, secret: str | None = None) -> str:
    key = secret.encode("utf-8") if secret is not None else _secret()
    return hmac.new(key, raw_body or b"", hashlib.sha512).hexdigest()


def verify_signature(*, raw_body: bytes, signature: str | None) -> bool:
    if not signature:
        return False
    if not _secret():
        # No secret configured: refuse everything
        return False
    computed = sign_payload(raw_body)
    return hmac.compare_digest(computed, str(signature).strip())

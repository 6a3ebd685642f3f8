"""Save requests, per-module save tokens and posted-text sanitising."""
from __future__ import annotations

import hashlib
import hmac
import re
import secrets
from collections.abc import Mapping
from dataclasses import dataclass, field
from time import time
from typing import Any, Callable

TOKEN_SUFFIX = "-token"
ENABLED_SUFFIX = "-enabled"

_SCRIPT_RE = re.compile(
    r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL
)
_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_WS_RE = re.compile(r"\s+")


def sanitize_text_field(value: Any) -> str:
    """Single-line plain text: tags, percent octets and extra whitespace removed."""
    text = _SCRIPT_RE.sub("", str(value))
    text = _TAG_RE.sub("", text)
    text = _OCTET_RE.sub("", text)
    return _WS_RE.sub(" ", text).strip()


@dataclass(frozen=True)
class SaveRequest:
    module_id: str
    token: str | None
    values: dict[str, Any] = field(default_factory=dict)
    enabled_keys: list[str] = field(default_factory=list)

    @classmethod
    def from_form(
        cls, module_id: str, form: Mapping[str, Any]
    ) -> "SaveRequest":
        """Extract one module's request from a posted form mapping.

        Keys: ``<id>`` (mapping of values), ``<id>-enabled`` (list of
        checked keys) and ``<id>-token``. Wrong shapes become empty.
        """
        values = form.get(module_id)
        enabled = form.get(module_id + ENABLED_SUFFIX)
        token = form.get(module_id + TOKEN_SUFFIX)
        return cls(
            module_id=module_id,
            token=token if isinstance(token, str) else None,
            values=dict(values) if isinstance(values, Mapping) else {},
            enabled_keys=list(enabled) if isinstance(enabled, list) else [],
        )


class TokenSigner:
    """HMAC save tokens bound to an action (the module id) with a TTL.

    Token format: ``<issued_at>.<hex signature>``.
    """

    def __init__(
        self,
        secret: str | bytes | None = None,
        ttl_seconds: int = 86400,
        clock: Callable[[], float] = time,
    ) -> None:
        if secret is None:
            secret = secrets.token_hex(32)
        self._secret = secret.encode() if isinstance(secret, str) else secret
        self._ttl = ttl_seconds
        self._clock = clock

    def _sign(self, action: str, issued: int) -> str:
        msg = f"{action}|{issued}".encode()
        return hmac.new(self._secret, msg, hashlib.sha256).hexdigest()[:32]

    def issue(self, action: str) -> str:
        issued = int(self._clock())
        return f"{issued}.{self._sign(action, issued)}"

    def verify(self, action: str, token: str | None) -> bool:
        if not token or "." not in token:
            return False
        issued_raw, sig = token.split(".", 1)
        try:
            issued = int(issued_raw)
        except ValueError:
            return False
        age = self._clock() - issued
        if age < 0 or age > self._ttl:
            return False
        return hmac.compare_digest(sig, self._sign(action, issued))


__all__ = [
    "SaveRequest",
    "TokenSigner",
    "sanitize_text_field",
    "TOKEN_SUFFIX",
    "ENABLED_SUFFIX",
]

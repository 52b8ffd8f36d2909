from __future__ import annotations

"""
Structured errors raised by the drop engine and its host runtime.

Every failure a caller can observe is a DropError subclass with a stable
machine-readable `code`, so UIs can tell "already claimed" apart from
"bad proof" or "not authorized":

    try:
        drop.claim(account, amount, root, proof)
    except NothingToClaim:
        ...
    except DropError as e:
        print(e.to_dict())
"""

from typing import Any, Dict, Mapping, Optional


class DropError(Exception):
    """
    Base error with a short code, a human-readable message and optional
    context for debugging / RPC wiring.

    Supported call patterns:

        DropError("simple message")
        DropError("message", context={...})
        DropError("message", code="custom_code")
    """

    code: str = "DropError"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code
        if code is not None:
            self.code = str(code)
        self.context: Dict[str, Any] = dict(context or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


class InvalidProof(DropError):
    """Leaf, root and proof do not chain to a consistent commitment."""

    code = "InvalidProof"


class NothingToClaim(DropError):
    """Requested cumulative amount does not exceed what was already paid."""

    code = "NothingToClaim"


class Unauthorized(DropError):
    """Caller is not the authorized principal for an admin-only operation."""

    code = "Unauthorized"


class InsufficientBalance(DropError):
    """A payout or withdrawal exceeds the asset balance held."""

    code = "InsufficientBalance"


class RootMismatch(DropError):
    """The supplied root is not the stored root (strict root policy only)."""

    code = "MerkleRootWasUpdated"


class ProofFormatError(DropError):
    """A packed proof is not a whole number of hashes, or is too deep."""

    code = "ProofFormatError"


class ValidationError(DropError):
    """Malformed argument: address width, amount range, root width..."""

    code = "ValidationError"


__all__ = [
    "DropError",
    "InvalidProof",
    "NothingToClaim",
    "Unauthorized",
    "InsufficientBalance",
    "RootMismatch",
    "ProofFormatError",
    "ValidationError",
]

"""
COINHYPE — Error Taxonomy

Every failure in the fair core is a local validation failure raised before
any outcome is computed (or, for SeedIntegrityError, during an audit).
All errors are ValueErrors so existing `except ValueError` call sites keep
working, and each carries a machine-readable code for API responses.
"""

from typing import Optional


class CasinoError(ValueError):
    """Base class. `code` is stable; `message` is for humans."""
    code = "CASINO_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, **context):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context

    def to_dict(self) -> dict:
        data = {"error": self.code, "message": self.message}
        if self.context:
            data["context"] = self.context
        return data


class InvalidBetAmountError(CasinoError):
    """Bet below/above limits, not a positive integer, or over balance."""
    code = "INVALID_BET_AMOUNT"


class InvalidGameParameterError(CasinoError):
    """Game-specific parameter outside its domain (e.g. mine count)."""
    code = "INVALID_GAME_PARAMETER"


class InvalidSeedError(CasinoError):
    """Empty seed, bad nonce, nonce reuse, or use of a revealed session."""
    code = "INVALID_SEED"


class SeedIntegrityError(CasinoError):
    """Hash or commitment mismatch found while auditing a round.

    Implies tampering; callers must surface it, never retry around it.
    """
    code = "SEED_INTEGRITY_FAILURE"

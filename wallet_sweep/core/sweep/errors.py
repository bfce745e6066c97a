"""
Sweep failure construction.

Every failure leaves the engine as a ``SweepFailure`` value. Inside the
executor a failing step raises ``SweepAborted`` carrying that value so the
settlement loop can stop at the first unrecoverable step.
"""

from typing import Any, Dict, Optional

from .models import SweepErrorCode, SweepFailure, SweepStage, TokenConfigReason


ADMISSION_STATUS = 400
CONFLICT_STATUS = 409


class SweepAborted(Exception):
    """A settlement step failed; the attempt must stop."""

    def __init__(self, failure: SweepFailure):
        super().__init__(failure.error)
        self.failure = failure


def sweep_error(
    status: int,
    code: SweepErrorCode,
    error: str,
    details: Optional[Dict[str, Any]] = None,
) -> SweepFailure:
    return SweepFailure(status=status, code=code, error=error, details=details or {})


def token_config_error(
    error: str,
    reason: TokenConfigReason,
    network: Optional[str] = None,
    symbol: Optional[str] = None,
    **extra: Any,
) -> SweepFailure:
    details: Dict[str, Any] = {}
    if network is not None:
        details["network"] = network
    if symbol is not None:
        details["symbol"] = symbol
    details["reason"] = reason.value
    details.update(extra)
    return sweep_error(CONFLICT_STATUS, SweepErrorCode.TOKEN_CONFIG_MISSING, error, details)


def transfer_failed(
    error: str,
    network: str,
    symbol: str,
    stage: SweepStage,
    exc: Optional[BaseException] = None,
    **extra: Any,
) -> SweepFailure:
    """Build an ASSET_TRANSFER_FAILED failure tagged with the failing stage."""
    details: Dict[str, Any] = {
        "network": network,
        "symbol": symbol,
        "stage": stage.value,
    }
    details.update(extra)
    if exc is not None:
        details["message"] = str(exc) or exc.__class__.__name__
    return sweep_error(CONFLICT_STATUS, SweepErrorCode.ASSET_TRANSFER_FAILED, error, details)


def unexpected_failure(exc: BaseException, network: Optional[str] = None) -> SweepFailure:
    """Normalize an error raised outside a tagged step."""
    details: Dict[str, Any] = {
        "stage": SweepStage.UNEXPECTED.value,
        "message": str(exc) or exc.__class__.__name__,
    }
    if network:
        details["network"] = network
    return sweep_error(
        CONFLICT_STATUS,
        SweepErrorCode.ASSET_TRANSFER_FAILED,
        "Asset sweep failed unexpectedly.",
        details,
    )


__all__ = [
    "ADMISSION_STATUS",
    "CONFLICT_STATUS",
    "SweepAborted",
    "sweep_error",
    "token_config_error",
    "transfer_failed",
    "unexpected_failure",
]

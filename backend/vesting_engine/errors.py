"""Vesting engine error taxonomy.

Every failure is reported synchronously to the caller. The HTTP layer renders
these as ``{"error": code, "detail": message}`` using ``status_code``.
"""


class VestingError(Exception):
    """Base class for all engine failures"""
    code = "vesting_error"
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class Unauthorized(VestingError):
    """Caller is not allowed to perform the operation"""
    code = "unauthorized"
    status_code = 403


class AlreadyRegistered(VestingError):
    code = "already_registered"
    status_code = 409


class UnknownBeneficiary(VestingError):
    code = "unknown_beneficiary"
    status_code = 404


class InvalidCategory(VestingError):
    code = "invalid_category"
    status_code = 400


class InvalidSchedule(VestingError):
    code = "invalid_schedule"
    status_code = 400


class AlreadyActivated(VestingError):
    """The schedule has already started"""
    code = "already_activated"
    status_code = 409


class NotStarted(VestingError):
    code = "not_started"
    status_code = 409


class NothingToClaim(VestingError):
    """Vested amount equals the amount already claimed"""
    code = "nothing_to_claim"
    status_code = 409


class AllocationRuleMissing(VestingError):
    """Category is valid but no allocation rule is configured for it"""
    code = "allocation_rule_missing"
    status_code = 400


class AllocationExceedsSupply(VestingError):
    code = "allocation_exceeds_supply"
    status_code = 400


class TransferFailed(VestingError):
    """The token ledger refused the transfer"""
    code = "transfer_failed"
    status_code = 409

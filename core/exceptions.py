"""
Typed errors raised by the reward ledger.

Every rejected operation raises exactly one of these. Nothing is retried or
recovered inside the ledger; the caller decides what to do with the error.
"""


class RewardLedgerError(Exception):
    """
    Base error for all ledger rejections.

    `code` is a stable, machine-readable identifier for the rejection kind.
    """

    code = "REWARD_LEDGER_ERROR"
    default_message = "The reward ledger rejected the operation."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class Unauthorized(RewardLedgerError):
    code = "UNAUTHORIZED"
    default_message = "Caller is not allowed to perform this operation."


class InvalidArgument(RewardLedgerError):
    code = "INVALID_ARGUMENT"
    default_message = "Invalid argument."


class NotFound(RewardLedgerError):
    code = "NOT_FOUND"
    default_message = "Reward does not exist."


class SystemPaused(RewardLedgerError):
    code = "SYSTEM_PAUSED"
    default_message = "The reward ledger is paused."


class RewardUnavailable(RewardLedgerError):
    code = "REWARD_UNAVAILABLE"
    default_message = "Reward is not available for redemption."


class OutOfStock(RewardLedgerError):
    code = "OUT_OF_STOCK"
    default_message = "Reward is out of stock."


class ArithmeticOverflow(RewardLedgerError):
    code = "ARITHMETIC_OVERFLOW"
    default_message = "Reward amount exceeds the supported range."


class MintFailed(RewardLedgerError):
    code = "MINT_FAILED"
    default_message = "The token ledger refused to mint the reward."


class TransferFailed(RewardLedgerError):
    code = "TRANSFER_FAILED"
    default_message = "The token ledger refused the payment transfer."

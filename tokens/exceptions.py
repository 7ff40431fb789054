"""
Errors raised by the Token Ledger.
"""


class TokenLedgerError(Exception):
    """Base error for token ledger operations."""

    pass


class InvalidAmount(TokenLedgerError):
    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Invalid token amount: {amount!r}")


class InsufficientBalance(TokenLedgerError):
    def __init__(self, holder: str, balance: int, required: int):
        self.holder = holder
        self.balance = balance
        self.required = required
        super().__init__(f"Insufficient funds. Balance: {balance}, Required: {required}")


class InsufficientAllowance(TokenLedgerError):
    def __init__(self, owner: str, spender: str, allowance: int, required: int):
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.required = required
        super().__init__(
            f"Insufficient allowance for {spender} on {owner}'s account. Allowance: {allowance}, Required: {required}"
        )


class MintUnauthorized(TokenLedgerError):
    def __init__(self, principal: str):
        self.principal = principal
        super().__init__(f"{principal} has no minting authority.")


class SupplyOverflow(TokenLedgerError):
    def __init__(self, total_supply: int, amount: int):
        self.total_supply = total_supply
        self.amount = amount
        super().__init__(f"Minting {amount} would overflow total supply {total_supply}.")


class TokenPermissionDenied(TokenLedgerError):
    def __init__(self, principal: str):
        self.principal = principal
        super().__init__(f"{principal} is not the token owner.")

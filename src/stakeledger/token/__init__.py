"""In-memory fungible token used as the ledger's external collaborator."""

from .basic_token import ZERO_ADDRESS, Approval, BasicToken, Transfer

__all__ = ["BasicToken", "Transfer", "Approval", "ZERO_ADDRESS"]

"""
Shared request dependencies.

Callers identify themselves with the X-Caller-Identity header, which is
trusted as already verified upstream. Clock and collaborator dependencies
exist so tests can override them through app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Header

from menagerie.services.collaborators import (
    MintService,
    TokenTransferService,
    get_mint_service,
    get_token_transfer,
)
from menagerie.services.randomness import Clock, SystemClock
from menagerie.services.validation import validate_identity


async def get_caller(x_caller_identity: Annotated[str, Header()]) -> str:
    """Authenticated caller identity from the X-Caller-Identity header."""
    validate_identity(x_caller_identity, "caller identity")
    return x_caller_identity


def get_clock() -> Clock:
    return SystemClock()


def get_token_transfer_service() -> TokenTransferService:
    return get_token_transfer()


def get_mint() -> MintService:
    return get_mint_service()


Caller = Annotated[str, Depends(get_caller)]
ClockDep = Annotated[Clock, Depends(get_clock)]
TokenTransferDep = Annotated[TokenTransferService, Depends(get_token_transfer_service)]
MintDep = Annotated[MintService, Depends(get_mint)]

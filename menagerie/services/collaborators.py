"""
External collaborators: token transfer and mint services.

The core only depends on the two protocols below. In-process implementations
are used unless a service URL is configured, in which case the httpx clients
call the remote service. Any collaborator failure surfaces as
ExternalServiceError, which aborts the enclosing transaction.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from menagerie.config import settings
from menagerie.models.failure import ExternalServiceError

logger = logging.getLogger(__name__)


class TokenTransferService(Protocol):
    """Moves external value between accounts."""

    async def transfer(self, from_account: str, to_account: str, amount: int) -> None: ...


class MintService(Protocol):
    """Mints a unique token for a drawn card."""

    async def mint(self, owner: str, token_ref: str) -> None: ...


@dataclass(frozen=True, slots=True)
class TransferRecord:
    from_account: str
    to_account: str
    amount: int


@dataclass
class LocalTokenTransfer:
    """In-process transfer service that records every transfer."""

    transfers: list[TransferRecord] = field(default_factory=list)

    async def transfer(self, from_account: str, to_account: str, amount: int) -> None:
        if amount <= 0:
            raise ExternalServiceError("token transfer", f"invalid amount {amount}")
        self.transfers.append(TransferRecord(from_account, to_account, amount))


@dataclass
class LocalMintService:
    """In-process mint service. Token refs are unique."""

    minted: dict[str, str] = field(default_factory=dict)

    async def mint(self, owner: str, token_ref: str) -> None:
        if token_ref in self.minted:
            raise ExternalServiceError("mint", f"token {token_ref} already minted")
        self.minted[token_ref] = owner


class HttpTokenTransferClient:
    """
    Client for a remote token-transfer service.

    POSTs {"from", "to", "amount"} to `{base_url}/transfers`.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def transfer(self, from_account: str, to_account: str, amount: int) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/transfers",
                    json={"from": from_account, "to": to_account, "amount": amount},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Token transfer %s -> %s failed: %s", from_account, to_account, e)
            raise ExternalServiceError("token transfer", str(e)) from e


class HttpMintClient:
    """
    Client for a remote mint service.

    POSTs {"owner", "token_ref"} to `{base_url}/mints`.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def mint(self, owner: str, token_ref: str) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/mints",
                    json={"owner": owner, "token_ref": token_ref},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Mint of %s for %s failed: %s", token_ref, owner, e)
            raise ExternalServiceError("mint", str(e)) from e


# Default instances
_token_transfer: TokenTransferService | None = None
_mint_service: MintService | None = None


def get_token_transfer() -> TokenTransferService:
    """Get the configured token-transfer service (singleton)."""
    global _token_transfer
    if _token_transfer is None:
        if settings.token_service_url:
            _token_transfer = HttpTokenTransferClient(
                settings.token_service_url, timeout=settings.collaborator_timeout
            )
        else:
            _token_transfer = LocalTokenTransfer()
    return _token_transfer


def get_mint_service() -> MintService:
    """Get the configured mint service (singleton)."""
    global _mint_service
    if _mint_service is None:
        if settings.mint_service_url:
            _mint_service = HttpMintClient(
                settings.mint_service_url, timeout=settings.collaborator_timeout
            )
        else:
            _mint_service = LocalMintService()
    return _mint_service


def reset_collaborators() -> None:
    """Drop the default instances (for testing)."""
    global _token_transfer, _mint_service
    _token_transfer = None
    _mint_service = None

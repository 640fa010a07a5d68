"""EVM ledger adapter built on web3.py."""

import asyncio
import re
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from aiohttp import ClientError
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import ContractLogicError, TransactionNotFound, Web3Exception

from config import get_settings
from crowdfund.services.abis import ERC20_ABI, FACTORY_ABI, FUNDRAISER_ABI
from crowdfund.services.errors import (
    LedgerRejected,
    SessionRequired,
    TransportFailure,
    UserDeclined,
)
from crowdfund.services.schemas.campaign import RawCampaignSnapshot
from crowdfund.services.schemas.chain import SigningSession, TransactionReceipt

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_TRANSPORT_ERRORS = (Web3Exception, ClientError, OSError, asyncio.TimeoutError)
_REVERT_PREFIX = re.compile(r"^execution reverted:?\s*")


def revert_reason(exc: ContractLogicError) -> str:
    """'execution reverted: Goal not met' -> 'Goal not met'."""
    raw: object = getattr(exc, "message", None) or str(exc)
    reason: str = _REVERT_PREFIX.sub("", str(raw)).strip()
    return reason or "execution reverted"


class EvmPendingTransaction:
    def __init__(self, ledger: "EvmLedger", tx_hash: str) -> None:
        self.tx_hash: str = tx_hash
        self._ledger: EvmLedger = ledger

    async def wait(self) -> TransactionReceipt:
        return await self._ledger.wait_for_receipt(self.tx_hash)


class EvmLedger:
    """Reads campaign contracts and submits signed transactions over JSON-RPC.

    Reads are retried with a linear back-off; writes are submitted exactly once.
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        poll_interval: float | None = None,
        w3: AsyncWeb3 | None = None,
    ) -> None:
        settings = get_settings()
        self.rpc_url: str = rpc_url or settings.chain.rpc_url
        self.retry_attempts: int = retry_attempts or settings.chain.retry_attempts
        self.retry_delay: float = retry_delay or settings.chain.retry_delay
        self.poll_interval: float = poll_interval or settings.chain.receipt_poll_interval
        self._w3: AsyncWeb3 = w3 or AsyncWeb3(AsyncHTTPProvider(self.rpc_url))

    def _contract(self, address: str, abi: list[dict[str, object]]) -> Any:
        return self._w3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=abi)

    async def _retry_read(self, func: Callable[[], Awaitable[T]]) -> T:
        last_error: BaseException | None = None
        for attempt in range(self.retry_attempts):
            try:
                return await func()
            except ContractLogicError as e:
                raise LedgerRejected(revert_reason(e)) from e
            except _TRANSPORT_ERRORS as e:
                last_error = e
                logger.warning(
                    "RPC call failed, retrying",
                    attempt=attempt + 1,
                    error=str(e)[:100],
                )
                if attempt < self.retry_attempts - 1:
                    await asyncio.sleep(self.retry_delay * (attempt + 1))
        raise TransportFailure(f"RPC call failed after {self.retry_attempts} attempts: {last_error}")

    # -- reads ------------------------------------------------------------------

    async def read_campaign(self, campaign: str, actor: str | None = None) -> RawCampaignSnapshot:
        fns = self._contract(campaign, FUNDRAISER_ABI).functions

        async def _fetch() -> RawCampaignSnapshot:
            (
                name,
                description,
                creator,
                goal_amount,
                deadline,
                total_raised,
                withdrawn,
                cancelled,
                fee_bps,
                token,
            ) = await asyncio.gather(
                fns.name().call(),
                fns.description().call(),
                fns.creator().call(),
                fns.goalAmount().call(),
                fns.deadline().call(),
                fns.totalRaised().call(),
                fns.withdrawn().call(),
                fns.cancelled().call(),
                fns.feeBps().call(),
                fns.usdc().call(),
            )
            donation: int = 0
            if actor:
                donation = await fns.donations(AsyncWeb3.to_checksum_address(actor)).call()
            return RawCampaignSnapshot(
                address=campaign,
                name=name,
                description=description,
                creator=creator,
                goal_amount=int(goal_amount),
                deadline=int(deadline),
                total_raised=int(total_raised),
                withdrawn=bool(withdrawn),
                cancelled=bool(cancelled),
                fee_bps=int(fee_bps),
                token=token,
                actor=actor,
                donation=int(donation),
            )

        return await self._retry_read(_fetch)

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        fns = self._contract(token, ERC20_ABI).functions

        async def _fetch() -> int:
            value = await fns.allowance(
                AsyncWeb3.to_checksum_address(owner),
                AsyncWeb3.to_checksum_address(spender),
            ).call()
            return int(value)

        return await self._retry_read(_fetch)

    async def list_campaigns(self, registry: str) -> list[str]:
        fns = self._contract(registry, FACTORY_ABI).functions

        async def _fetch() -> list[str]:
            return list(await fns.getFundraisers().call())

        return await self._retry_read(_fetch)

    # -- writes -----------------------------------------------------------------

    async def approve(
        self, session: SigningSession, token: str, spender: str, amount: int
    ) -> EvmPendingTransaction:
        fn = self._contract(token, ERC20_ABI).functions.approve(
            AsyncWeb3.to_checksum_address(spender), amount
        )
        return await self._send(session, f"Approve {spender} to spend {amount} units", fn)

    async def donate(self, session: SigningSession, campaign: str, amount: int) -> EvmPendingTransaction:
        fn = self._contract(campaign, FUNDRAISER_ABI).functions.donate(amount)
        return await self._send(session, f"Donate {amount} units to {campaign}", fn)

    async def withdraw(self, session: SigningSession, campaign: str) -> EvmPendingTransaction:
        fn = self._contract(campaign, FUNDRAISER_ABI).functions.withdraw()
        return await self._send(session, f"Withdraw funds from {campaign}", fn)

    async def cancel(self, session: SigningSession, campaign: str) -> EvmPendingTransaction:
        fn = self._contract(campaign, FUNDRAISER_ABI).functions.cancel()
        return await self._send(session, f"Cancel campaign {campaign}", fn)

    async def claim_refund(self, session: SigningSession, campaign: str) -> EvmPendingTransaction:
        fn = self._contract(campaign, FUNDRAISER_ABI).functions.claimRefund()
        return await self._send(session, f"Claim refund from {campaign}", fn)

    async def create_campaign(
        self,
        session: SigningSession,
        registry: str,
        name: str,
        description: str,
        goal_amount: int,
        deadline: int,
    ) -> EvmPendingTransaction:
        fn = self._contract(registry, FACTORY_ABI).functions.createFundraiser(
            name, description, goal_amount, deadline
        )
        return await self._send(session, f"Create campaign '{name}'", fn)

    async def _send(self, session: SigningSession, description: str, fn: Any) -> EvmPendingTransaction:
        account: LocalAccount = _local_account(session)
        params: dict[str, object] = {"from": account.address}
        if session.chain_id is not None:
            params["chainId"] = session.chain_id

        try:
            params["nonce"] = await self._w3.eth.get_transaction_count(account.address, "pending")
            # gas estimation surfaces revert reasons before anything is signed
            tx: dict[str, Any] = await fn.build_transaction(params)
        except ContractLogicError as e:
            raise LedgerRejected(revert_reason(e)) from e
        except _TRANSPORT_ERRORS as e:
            raise TransportFailure(f"Could not prepare transaction: {e}") from e

        if session.authorize is not None and not session.authorize(description):
            raise UserDeclined("User rejected the request")

        try:
            signed = account.sign_transaction(tx)
        except (ValueError, TypeError) as e:
            logger.warning("Signing failed", description=description, error=str(e)[:100])
            raise LedgerRejected(f"Could not sign transaction: {e}") from e

        try:
            raw_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except ContractLogicError as e:
            raise LedgerRejected(revert_reason(e)) from e
        except _TRANSPORT_ERRORS as e:
            raise TransportFailure(f"Could not submit transaction: {e}") from e

        tx_hash: str = AsyncWeb3.to_hex(raw_hash)
        logger.info("Transaction submitted", description=description, tx_hash=tx_hash)
        return EvmPendingTransaction(self, tx_hash)

    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        """Poll until the transaction is mined. There is no timeout."""
        while True:
            try:
                receipt = await self._w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                await asyncio.sleep(self.poll_interval)
                continue
            except _TRANSPORT_ERRORS as e:
                raise TransportFailure(f"Could not confirm transaction {tx_hash}: {e}") from e
            succeeded: bool = receipt["status"] == 1
            logger.info(
                "Transaction confirmed",
                tx_hash=tx_hash,
                block_number=receipt["blockNumber"],
                succeeded=succeeded,
            )
            return TransactionReceipt(
                tx_hash=tx_hash,
                block_number=receipt["blockNumber"],
                succeeded=succeeded,
            )


def _local_account(session: SigningSession) -> LocalAccount:
    if not session.connected or not isinstance(session.signer, LocalAccount):
        raise SessionRequired("This session has no signing key")
    return session.signer


class LocalAccountProvider:
    """Builds signing sessions from a private key (WALLET_PRIVATE_KEY by default)."""

    def __init__(
        self,
        private_key: str | None = None,
        chain_id: int | None = None,
        authorize: Callable[[str], bool] | None = None,
    ) -> None:
        settings = get_settings()
        self.private_key: str | None = private_key or settings.wallet.private_key
        self.chain_id: int = chain_id or settings.chain.chain_id
        self.authorize: Callable[[str], bool] | None = authorize

    async def connect(self) -> SigningSession:
        if not self.private_key:
            logger.info("No signing key configured, read-only session", chain_id=self.chain_id)
            return SigningSession(chain_id=self.chain_id)
        account: LocalAccount = Account.from_key(self.private_key)
        return SigningSession(
            address=account.address,
            chain_id=self.chain_id,
            signer=account,
            authorize=self.authorize,
        )

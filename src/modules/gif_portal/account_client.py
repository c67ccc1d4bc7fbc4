"""
Remote Account Client
=====================
The GIF portal program's three instructions and one account read, behind a
uniform call contract.

Architecture:
    intent ──▶ Instruction (discriminator + borsh args, exact account wiring)
                   ↓
           MessageV0 (payer = connected wallet) + latest blockhash
                   ↓
           signatures from each required signer (wallet, BaseAccount)
                   ↓
           VersionedTransaction ──▶ RPC ──▶ CallResult

Every call is single-shot. Failures are caught here and classified; nothing
is retried, because start_stuff_off is not idempotent and a blind retry of
add_gif would duplicate the record.
"""

from typing import Dict, List, Optional

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.types import TxOpts
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.transaction import VersionedTransaction

from src.modules.gif_portal.codec import (
    IX_APPEND,
    IX_INITIALIZE,
    IX_VOTE,
    AccountDecodeError,
    decode_base_account,
    encode_instruction,
)
from src.modules.gif_portal.config import PortalConfig
from src.modules.gif_portal.models import RecordList
from src.modules.gif_portal.results import CallResult, CallStatus
from src.modules.gif_portal.wallet import WalletProvider
from src.shared.system.logging import Logger


class RemoteAccountClient:
    """
    Client for the fixed (program_id, BaseAccount) pair.

    The connected wallet is fee payer and signer of every call; the
    BaseAccount keypair additionally signs start_stuff_off, which creates it.
    """

    def __init__(
        self,
        config: PortalConfig,
        wallet: WalletProvider,
        rpc: Optional[AsyncClient] = None,
    ):
        self.program_id = config.program_id
        self._base_account: Keypair = config.base_account
        self.base_account = config.base_account_address
        self._wallet = wallet
        self._commitment = Commitment(config.preflight_commitment)
        self.rpc = rpc or AsyncClient(config.rpc_url, commitment=self._commitment)

    # =========================================================================
    # READ
    # =========================================================================

    async def fetch_records(self) -> CallResult:
        """Authoritative read. A missing account is UNINITIALIZED, not an error."""
        op = "fetch_records"
        try:
            resp = await self.rpc.get_account_info(self.base_account, commitment=self._commitment)
        except Exception as e:
            Logger.warning(f"[RPC] Error fetching BaseAccount: {e}")
            return CallResult.failed(op, CallStatus.FETCH_FAILED, str(e))

        if resp.value is None:
            Logger.info(f"[RPC] BaseAccount {self.base_account} not found (uninitialized)")
            return CallResult.ok(op, records=RecordList.uninitialized())

        try:
            records = decode_base_account(resp.value.data)
        except AccountDecodeError as e:
            Logger.error(f"[RPC] BaseAccount data unreadable: {e}")
            return CallResult.failed(op, CallStatus.FETCH_FAILED, str(e))

        Logger.debug(f"[RPC] Got BaseAccount with {len(records.records)} GIFs")
        return CallResult.ok(op, records=records)

    # =========================================================================
    # MUTATING CALLS
    # =========================================================================

    async def initialize_account(self, identity: Optional[Pubkey]) -> CallResult:
        """
        Create the shared BaseAccount. Not idempotent: a second call against an
        existing account fails on chain, so callers must check state first.
        """
        op = "initialize_account"
        if identity is None:
            return CallResult.failed(op, CallStatus.NOT_CONNECTED, "wallet not connected")

        ix = Instruction(
            program_id=self.program_id,
            accounts=[
                AccountMeta(pubkey=self.base_account, is_signer=True, is_writable=True),
                AccountMeta(pubkey=identity, is_signer=True, is_writable=True),
                AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            ],
            data=encode_instruction(IX_INITIALIZE),
        )
        result = await self._send(op, identity, ix, extra_signers=[self._base_account])
        if result.success:
            Logger.success(f"[PORTAL] Created a new BaseAccount w/ address: {self.base_account}")
        return result

    async def append_record(self, link: str, identity: Optional[Pubkey]) -> CallResult:
        """Append `link` owned by `identity` with zero votes."""
        op = "append_record"
        if not link:
            return CallResult.failed(op, CallStatus.MALFORMED_INPUT, "no link provided")
        if identity is None:
            return CallResult.failed(op, CallStatus.NOT_CONNECTED, "wallet not connected")

        result = await self._send(op, identity, self._list_instruction(IX_APPEND, link, identity))
        if result.success:
            Logger.success(f"[PORTAL] GIF sent to program: {link}")
        return result

    async def update_record_vote(self, link: str, identity: Optional[Pubkey]) -> CallResult:
        """
        Vote for `link`. The program bumps the first record whose link matches;
        with duplicate links only that one moves. Inherited from the program's
        contract and deliberately left as is.
        """
        op = "update_record_vote"
        if not link:
            return CallResult.failed(op, CallStatus.MALFORMED_INPUT, "no link provided")
        if identity is None:
            return CallResult.failed(op, CallStatus.NOT_CONNECTED, "wallet not connected")

        result = await self._send(op, identity, self._list_instruction(IX_VOTE, link, identity))
        if result.success:
            Logger.success(f"[PORTAL] GIF updated: {link}")
        return result

    def _list_instruction(self, name: str, link: str, identity: Pubkey) -> Instruction:
        return Instruction(
            program_id=self.program_id,
            accounts=[
                AccountMeta(pubkey=self.base_account, is_signer=False, is_writable=True),
                AccountMeta(pubkey=identity, is_signer=True, is_writable=True),
            ],
            data=encode_instruction(name, link),
        )

    # =========================================================================
    # TRANSACTION PLUMBING
    # =========================================================================

    async def _send(
        self,
        op: str,
        payer: Pubkey,
        ix: Instruction,
        extra_signers: Optional[List[Keypair]] = None,
    ) -> CallResult:
        try:
            blockhash_resp = await self.rpc.get_latest_blockhash(commitment=self._commitment)
            latest = blockhash_resp.value

            msg = MessageV0.try_compile(
                payer=payer,
                instructions=[ix],
                address_lookup_table_accounts=[],
                recent_blockhash=latest.blockhash,
            )
            signatures = await self._collect_signatures(msg, payer, extra_signers or [])
            tx = VersionedTransaction.populate(msg, signatures)

            resp = await self.rpc.send_transaction(
                tx,
                opts=TxOpts(
                    skip_confirmation=False,
                    preflight_commitment=self._commitment,
                    last_valid_block_height=latest.last_valid_block_height,
                ),
            )
        except Exception as e:
            Logger.error(f"[RPC] {op} failed: {e}")
            return CallResult.failed(op, CallStatus.REMOTE_CALL_REJECTED, str(e))

        signature = str(resp.value)
        Logger.debug(f"[RPC] {op} confirmed: {signature}")
        return CallResult.ok(op, signature=signature)

    async def _collect_signatures(
        self,
        msg: MessageV0,
        payer: Pubkey,
        extra_signers: List[Keypair],
    ) -> List[Signature]:
        """Signatures in the order of the message's signer keys."""
        payload = to_bytes_versioned(msg)
        local: Dict[Pubkey, Keypair] = {kp.pubkey(): kp for kp in extra_signers}
        required = msg.account_keys[: msg.header.num_required_signatures]

        signatures = []
        for key in required:
            if key == payer:
                signatures.append(await self._wallet.sign_message(payload))
            elif key in local:
                signatures.append(local[key].sign_message(payload))
            else:
                raise ValueError(f"no signer available for {key}")
        return signatures

    async def close(self) -> None:
        await self.rpc.close()

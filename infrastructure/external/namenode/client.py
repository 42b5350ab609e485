"""
Namenode 协议客户端

Implements NamenodeProtocol on top of the gRPC transport:
- builds the wire request from domain arguments
- invokes the retrying proxy
- decodes the response into domain values
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Union

import grpc

from core.config import NamenodeSettings, settings
from core.logging_config import get_logger
from domain.common.exceptions import ClosedError
from domain.namenode.entity import (
    BlocksWithLocations,
    CheckpointSignature,
    DatanodeID,
    ErrorReportCode,
    ExportedBlockKeys,
    NamenodeCommand,
    NamenodeRegistration,
    NamespaceInfo,
    ProtocolOperation,
    ProtocolSignature,
    RemoteEditLogManifest,
)
from domain.namenode.protocol import PROTOCOL_NAME, PROTOCOL_VERSION
from grpc_app.interceptors.exceptions import translate_rpc_error
from grpc_app.mappers import namenode as mapper
from grpc_app.messages import WireMessage
from grpc_app.messages import namenode as pb
from grpc_app.retry import MethodRetryTable, RetryingProxy, default_retry_table
from grpc_app.stub import NamenodeProtocolStub, NamenodeTransport, create_channel


logger = get_logger(__name__)


class NamenodeProtocolClient:
    """
    Client-side translator for the namenode protocol.

    One instance per bound endpoint. The transport handle is held for the
    whole lifetime of the client and released exactly once by `close()`;
    afterwards every operation raises ClosedError.
    """

    def __init__(self, transport: NamenodeTransport) -> None:
        self._transport: Optional[NamenodeTransport] = transport
        self._close_lock = threading.Lock()

    @classmethod
    def connect(
        cls,
        cfg: Optional[NamenodeSettings] = None,
        *,
        retry_table: Optional[MethodRetryTable] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "NamenodeProtocolClient":
        """Bind a client to the configured namenode endpoint."""
        cfg = cfg or settings.namenode
        stub = NamenodeProtocolStub(create_channel(cfg), timeout=cfg.timeout)
        proxy = RetryingProxy(stub, retry_table or default_retry_table(cfg), sleep=sleep)
        logger.info("namenode_client_bound", address=cfg.address, tls=cfg.tls.enabled, user=cfg.user)
        return cls(proxy)

    @property
    def closed(self) -> bool:
        return self._transport is None

    def close(self) -> None:
        """Release the transport handle; later calls are no-ops."""
        with self._close_lock:
            transport, self._transport = self._transport, None
        if transport is None:
            return
        try:
            transport.close()
        except Exception:
            # The handle is already dropped; a failed release cannot be retried
            logger.exception("namenode_client_close_failed")
            raise
        logger.info("namenode_client_closed")

    def __enter__(self) -> "NamenodeProtocolClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _call(self, operation: ProtocolOperation, request: WireMessage) -> WireMessage:
        transport = self._transport
        if transport is None:
            raise ClosedError()
        try:
            return transport.invoke(operation, request)
        except grpc.RpcError as exc:
            # Only reached when the transport is not a RetryingProxy
            raise translate_rpc_error(exc) from exc

    # Protocol introspection

    def get_protocol_version(
        self, protocol_name: str = PROTOCOL_NAME, client_version: int = PROTOCOL_VERSION
    ) -> int:
        resp = self._call(
            ProtocolOperation.GET_PROTOCOL_VERSION,
            pb.GetProtocolVersionRequest(protocol=protocol_name, client_version=client_version),
        )
        return resp.version

    def get_protocol_signature(
        self, protocol_name: str, client_version: int, client_method_hash: int
    ) -> ProtocolSignature:
        resp = self._call(
            ProtocolOperation.GET_PROTOCOL_SIGNATURE,
            pb.GetProtocolSignatureRequest(
                protocol=protocol_name,
                client_version=client_version,
                client_method_hash=client_method_hash,
            ),
        )
        return mapper.protocol_signature_from_proto(resp.signature)

    # Namenode operations

    def get_blocks(self, datanode: DatanodeID, size: int) -> BlocksWithLocations:
        resp = self._call(ProtocolOperation.GET_BLOCKS, mapper.get_blocks_request(datanode, size))
        return mapper.blocks_from_proto(resp.blocks)

    def get_block_keys(self) -> ExportedBlockKeys:
        resp = self._call(ProtocolOperation.GET_BLOCK_KEYS, mapper.GET_BLOCK_KEYS)
        return mapper.block_keys_from_proto(resp.keys)

    def get_transaction_id(self) -> int:
        resp = self._call(ProtocolOperation.GET_TRANSACTION_ID, mapper.GET_TRANSACTION_ID)
        return resp.tx_id

    def roll_edit_log(self) -> CheckpointSignature:
        resp = self._call(ProtocolOperation.ROLL_EDIT_LOG, mapper.ROLL_EDIT_LOG)
        return mapper.checkpoint_signature_from_proto(resp.signature)

    def version_request(self) -> NamespaceInfo:
        resp = self._call(ProtocolOperation.VERSION_REQUEST, mapper.VERSION_REQUEST)
        return mapper.namespace_info_from_proto(resp.info)

    def error_report(
        self, registration: NamenodeRegistration, error_code: Union[ErrorReportCode, int], msg: str
    ) -> None:
        """Report a peer-side error. Codes outside ErrorReportCode are sent as-is."""
        try:
            code = ErrorReportCode(error_code)
        except ValueError:
            code = int(error_code)
        log = logger.error if code == ErrorReportCode.FATAL else logger.info
        log(
            "namenode_error_report",
            code=code.name if isinstance(code, ErrorReportCode) else code,
            rpc_address=registration.rpc_address,
        )
        self._call(ProtocolOperation.ERROR_REPORT, mapper.error_report_request(registration, code, msg))

    def register(self, registration: NamenodeRegistration) -> NamenodeRegistration:
        resp = self._call(ProtocolOperation.REGISTER, mapper.register_request(registration))
        return mapper.registration_from_proto(resp.registration)

    def start_checkpoint(self, registration: NamenodeRegistration) -> NamenodeCommand:
        resp = self._call(ProtocolOperation.START_CHECKPOINT, mapper.start_checkpoint_request(registration))
        return mapper.command_from_proto(resp.command)

    def end_checkpoint(self, registration: NamenodeRegistration, sig: CheckpointSignature) -> None:
        self._call(ProtocolOperation.END_CHECKPOINT, mapper.end_checkpoint_request(registration, sig))

    def get_edit_log_manifest(self, since_txid: int) -> RemoteEditLogManifest:
        resp = self._call(
            ProtocolOperation.GET_EDIT_LOG_MANIFEST, mapper.get_edit_log_manifest_request(since_txid)
        )
        return mapper.edit_log_manifest_from_proto(resp.manifest)

"""
Namenode protocol abstraction (domain port).

This layer must not import the transport. It defines the contract that
auxiliary coordinators (backup / checkpoint nodes, balancers) depend upon;
the gRPC-backed client in `infrastructure` is one implementation.
"""
from __future__ import annotations

from typing import Protocol, Union, runtime_checkable

from domain.namenode.entity import (
    BlocksWithLocations,
    CheckpointSignature,
    DatanodeID,
    ErrorReportCode,
    ExportedBlockKeys,
    NamenodeCommand,
    NamenodeRegistration,
    NamespaceInfo,
    ProtocolSignature,
    RemoteEditLogManifest,
)


PROTOCOL_NAME = "namenode.v1.NamenodeProtocol"
PROTOCOL_VERSION = 6


@runtime_checkable
class NamenodeProtocol(Protocol):
    """Control-plane operations a namenode exposes to its auxiliary peers.

    Every operation is blocking and may raise RemoteError or TransportError;
    decoding failures raise DecodeError and calls on a closed client raise
    ClosedError.
    """

    def get_protocol_version(
        self, protocol_name: str = PROTOCOL_NAME, client_version: int = PROTOCOL_VERSION
    ) -> int: ...

    def get_protocol_signature(
        self, protocol_name: str, client_version: int, client_method_hash: int
    ) -> ProtocolSignature: ...

    def get_blocks(self, datanode: DatanodeID, size: int) -> BlocksWithLocations: ...

    def get_block_keys(self) -> ExportedBlockKeys: ...

    def get_transaction_id(self) -> int: ...

    def roll_edit_log(self) -> CheckpointSignature: ...

    def version_request(self) -> NamespaceInfo: ...

    def error_report(
        self, registration: NamenodeRegistration, error_code: Union[ErrorReportCode, int], msg: str
    ) -> None: ...

    def register(self, registration: NamenodeRegistration) -> NamenodeRegistration: ...

    def start_checkpoint(self, registration: NamenodeRegistration) -> NamenodeCommand: ...

    def end_checkpoint(self, registration: NamenodeRegistration, sig: CheckpointSignature) -> None: ...

    def get_edit_log_manifest(self, since_txid: int) -> RemoteEditLogManifest: ...

    def close(self) -> None: ...

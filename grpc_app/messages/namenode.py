"""Wire messages of the namenode protocol.

Every request/response pair is a frozen pydantic model validated in strict
mode: required fields have no default and values are never coerced, so an
incomplete or ill-typed payload fails validation instead of producing a
plausible-looking message.
"""
from __future__ import annotations

from typing import Literal, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict

from domain.namenode.entity import ProtocolOperation


class WireMessage(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="ignore",
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )


# Shared structures

class StorageInfoProto(WireMessage):
    layout_version: int
    namespace_id: int
    cluster_id: str
    c_time: int


class NamenodeRegistrationProto(WireMessage):
    rpc_address: str
    http_address: str
    storage_info: StorageInfoProto
    role: Literal["namenode", "backup", "checkpoint"] = "namenode"


class DatanodeIDProto(WireMessage):
    ip_addr: str
    host_name: str
    storage_id: str
    xfer_port: int
    info_port: int
    ipc_port: int


class BlockProto(WireMessage):
    block_id: int
    generation_stamp: int
    num_bytes: int


class BlockWithLocationsProto(WireMessage):
    block: BlockProto
    storage_ids: Tuple[str, ...] = ()


class BlocksWithLocationsProto(WireMessage):
    blocks: Tuple[BlockWithLocationsProto, ...] = ()


class BlockKeyProto(WireMessage):
    key_id: int
    expiry_date: int
    key_bytes: bytes = b""


class ExportedBlockKeysProto(WireMessage):
    is_block_token_enabled: bool
    key_update_interval: int
    token_lifetime: int
    current_key: BlockKeyProto
    all_keys: Tuple[BlockKeyProto, ...] = ()


class CheckpointSignatureProto(WireMessage):
    block_pool_id: str
    most_recent_checkpoint_txid: int
    cur_segment_txid: int
    storage_info: StorageInfoProto


class NamespaceInfoProto(WireMessage):
    build_version: str
    block_pool_id: str
    storage_info: StorageInfoProto
    software_version: str


class CheckpointCommandProto(WireMessage):
    signature: CheckpointSignatureProto
    need_to_return_image: bool


class NamenodeCommandProto(WireMessage):
    action: int
    type: Literal["NamenodeCommand", "CheckpointCommand"]
    checkpoint_cmd: Optional[CheckpointCommandProto] = None


class RemoteEditLogProto(WireMessage):
    start_txid: int
    end_txid: int
    is_in_progress: bool = False


class RemoteEditLogManifestProto(WireMessage):
    logs: Tuple[RemoteEditLogProto, ...] = ()


class ProtocolSignatureProto(WireMessage):
    version: int
    methods: Optional[Tuple[int, ...]] = None


# Requests / responses

class GetProtocolVersionRequest(WireMessage):
    protocol: str
    client_version: int


class GetProtocolVersionResponse(WireMessage):
    version: int


class GetProtocolSignatureRequest(WireMessage):
    protocol: str
    client_version: int
    client_method_hash: int


class GetProtocolSignatureResponse(WireMessage):
    signature: ProtocolSignatureProto


class GetBlocksRequest(WireMessage):
    datanode: DatanodeIDProto
    size: int


class GetBlocksResponse(WireMessage):
    blocks: BlocksWithLocationsProto


class GetBlockKeysRequest(WireMessage):
    pass


class GetBlockKeysResponse(WireMessage):
    keys: ExportedBlockKeysProto


class GetTransactionIdRequest(WireMessage):
    pass


class GetTransactionIdResponse(WireMessage):
    tx_id: int


class RollEditLogRequest(WireMessage):
    pass


class RollEditLogResponse(WireMessage):
    signature: CheckpointSignatureProto


class VersionRequest(WireMessage):
    pass


class VersionResponse(WireMessage):
    info: NamespaceInfoProto


class ErrorReportRequest(WireMessage):
    registration: NamenodeRegistrationProto
    error_code: int
    msg: str


class ErrorReportResponse(WireMessage):
    pass


class RegisterRequest(WireMessage):
    registration: NamenodeRegistrationProto


class RegisterResponse(WireMessage):
    registration: NamenodeRegistrationProto


class StartCheckpointRequest(WireMessage):
    registration: NamenodeRegistrationProto


class StartCheckpointResponse(WireMessage):
    command: NamenodeCommandProto


class EndCheckpointRequest(WireMessage):
    registration: NamenodeRegistrationProto
    signature: CheckpointSignatureProto


class EndCheckpointResponse(WireMessage):
    pass


class GetEditLogManifestRequest(WireMessage):
    since_txid: int


class GetEditLogManifestResponse(WireMessage):
    manifest: RemoteEditLogManifestProto


# operation -> (request type, response type)
OPERATION_MESSAGES: dict[ProtocolOperation, Tuple[Type[WireMessage], Type[WireMessage]]] = {
    ProtocolOperation.GET_PROTOCOL_VERSION: (GetProtocolVersionRequest, GetProtocolVersionResponse),
    ProtocolOperation.GET_PROTOCOL_SIGNATURE: (GetProtocolSignatureRequest, GetProtocolSignatureResponse),
    ProtocolOperation.GET_BLOCKS: (GetBlocksRequest, GetBlocksResponse),
    ProtocolOperation.GET_BLOCK_KEYS: (GetBlockKeysRequest, GetBlockKeysResponse),
    ProtocolOperation.GET_TRANSACTION_ID: (GetTransactionIdRequest, GetTransactionIdResponse),
    ProtocolOperation.ROLL_EDIT_LOG: (RollEditLogRequest, RollEditLogResponse),
    ProtocolOperation.VERSION_REQUEST: (VersionRequest, VersionResponse),
    ProtocolOperation.ERROR_REPORT: (ErrorReportRequest, ErrorReportResponse),
    ProtocolOperation.REGISTER: (RegisterRequest, RegisterResponse),
    ProtocolOperation.START_CHECKPOINT: (StartCheckpointRequest, StartCheckpointResponse),
    ProtocolOperation.END_CHECKPOINT: (EndCheckpointRequest, EndCheckpointResponse),
    ProtocolOperation.GET_EDIT_LOG_MANIFEST: (GetEditLogManifestRequest, GetEditLogManifestResponse),
}

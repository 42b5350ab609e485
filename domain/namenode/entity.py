"""
Namenode 协议领域值对象 - 不可变，按值比较
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Tuple


class ProtocolOperation(str, Enum):
    """Remote operations of the namenode protocol; values are wire method names."""

    GET_PROTOCOL_VERSION = "getProtocolVersion"
    GET_PROTOCOL_SIGNATURE = "getProtocolSignature"
    GET_BLOCKS = "getBlocks"
    GET_BLOCK_KEYS = "getBlockKeys"
    GET_TRANSACTION_ID = "getTransactionID"
    ROLL_EDIT_LOG = "rollEditLog"
    VERSION_REQUEST = "versionRequest"
    ERROR_REPORT = "errorReport"
    REGISTER = "register"
    START_CHECKPOINT = "startCheckpoint"
    END_CHECKPOINT = "endCheckpoint"
    GET_EDIT_LOG_MANIFEST = "getEditLogManifest"


class NamenodeRole(str, Enum):
    """节点角色"""
    NAMENODE = "namenode"
    BACKUP = "backup"
    CHECKPOINT = "checkpoint"


class NamenodeCommandAction(IntEnum):
    """Action codes carried by a NamenodeCommand."""
    NOOP = 0
    CHECKPOINT = 1
    FINALIZE = 2
    SHUTDOWN = 3


class ErrorReportCode(IntEnum):
    NOTIFY = 0
    FATAL = 1


@dataclass(frozen=True)
class StorageInfo:
    """存储元信息：布局版本、命名空间、集群标识与创建时间"""

    layout_version: int
    namespace_id: int
    cluster_id: str
    c_time: int


@dataclass(frozen=True)
class NamenodeRegistration:
    """Identity of a coordinator-like peer (backup / checkpoint node)."""

    rpc_address: str
    http_address: str
    storage_info: StorageInfo
    role: NamenodeRole = NamenodeRole.NAMENODE

    def __post_init__(self):
        if not self.rpc_address:
            raise ValueError("rpc_address must not be empty")
        if not self.http_address:
            raise ValueError("http_address must not be empty")


@dataclass(frozen=True)
class DatanodeID:
    ip_addr: str
    host_name: str
    storage_id: str
    xfer_port: int
    info_port: int
    ipc_port: int


@dataclass(frozen=True)
class Block:
    block_id: int
    generation_stamp: int
    num_bytes: int

    def __post_init__(self):
        if self.num_bytes < 0:
            raise ValueError(f"Block size must not be negative: {self.num_bytes}")


@dataclass(frozen=True)
class BlockWithLocations:
    block: Block
    storage_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BlocksWithLocations:
    blocks: Tuple[BlockWithLocations, ...] = ()

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks)


@dataclass(frozen=True)
class BlockKey:
    key_id: int
    expiry_date: int
    key_bytes: bytes = b""


@dataclass(frozen=True)
class ExportedBlockKeys:
    """Block token key material exported by the namenode."""

    is_block_token_enabled: bool
    key_update_interval: int
    token_lifetime: int
    current_key: BlockKey
    all_keys: Tuple[BlockKey, ...] = ()


@dataclass(frozen=True, order=True)
class CheckpointSignature:
    """
    检查点签名 - rollEditLog 产生，endCheckpoint 原样回传

    Ordering follows the storage info first and then the transaction ids,
    so a later checkpoint of the same namespace compares greater.
    """

    layout_version: int
    namespace_id: int
    c_time: int
    most_recent_checkpoint_txid: int
    cur_segment_txid: int
    cluster_id: str = ""
    block_pool_id: str = ""

    @property
    def storage_info(self) -> StorageInfo:
        return StorageInfo(
            layout_version=self.layout_version,
            namespace_id=self.namespace_id,
            cluster_id=self.cluster_id,
            c_time=self.c_time,
        )


@dataclass(frozen=True)
class NamespaceInfo:
    storage_info: StorageInfo
    build_version: str
    block_pool_id: str
    software_version: str


@dataclass(frozen=True)
class NamenodeCommand:
    action: NamenodeCommandAction


@dataclass(frozen=True)
class CheckpointCommand(NamenodeCommand):
    """The CHECKPOINT variant: tells the caller which signature to checkpoint against."""

    signature: Optional[CheckpointSignature] = None
    need_to_return_image: bool = True

    def __post_init__(self):
        if self.action != NamenodeCommandAction.CHECKPOINT:
            raise ValueError("CheckpointCommand requires the CHECKPOINT action")
        if self.signature is None:
            raise ValueError("CheckpointCommand requires a signature")


@dataclass(frozen=True)
class RemoteEditLog:
    """One edit log segment; an in-progress segment has no final end txid yet."""

    start_txid: int
    end_txid: int
    in_progress: bool = False

    def __post_init__(self):
        if not self.in_progress and self.end_txid < self.start_txid:
            raise ValueError(
                f"Finalized segment ends before it starts: {self.start_txid}-{self.end_txid}"
            )


@dataclass(frozen=True)
class RemoteEditLogManifest:
    logs: Tuple[RemoteEditLog, ...] = ()

    def __post_init__(self):
        prev: Optional[RemoteEditLog] = None
        for log in self.logs:
            if prev is not None:
                if log.start_txid <= prev.start_txid:
                    raise ValueError("Edit log segments must be ordered by start txid")
                if prev.in_progress or log.start_txid <= prev.end_txid:
                    raise ValueError(
                        f"Edit log segments overlap: {prev.start_txid}-{prev.end_txid} "
                        f"and {log.start_txid}-{log.end_txid}"
                    )
            prev = log


@dataclass(frozen=True)
class ProtocolSignature:
    version: int
    methods: Optional[Tuple[int, ...]] = None

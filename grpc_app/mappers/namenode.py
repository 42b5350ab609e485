from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from domain.common.exceptions import DecodeError
from domain.namenode.entity import (
    Block,
    BlockKey,
    BlocksWithLocations,
    BlockWithLocations,
    CheckpointCommand,
    CheckpointSignature,
    DatanodeID,
    ExportedBlockKeys,
    NamenodeCommand,
    NamenodeCommandAction,
    NamenodeRegistration,
    NamenodeRole,
    NamespaceInfo,
    ProtocolSignature,
    RemoteEditLog,
    RemoteEditLogManifest,
    StorageInfo,
)
from grpc_app.messages import namenode as pb


T = TypeVar("T")

# Requests with no parameters are built once; frozen models cannot be mutated.
GET_BLOCK_KEYS = pb.GetBlockKeysRequest()
GET_TRANSACTION_ID = pb.GetTransactionIdRequest()
ROLL_EDIT_LOG = pb.RollEditLogRequest()
VERSION_REQUEST = pb.VersionRequest()


def _decoder(fn: Callable[..., T]) -> Callable[..., T]:
    """Turn domain validation failures into DecodeError."""

    @wraps(fn)
    def wrapper(msg, *args, **kwargs) -> T:
        try:
            return fn(msg, *args, **kwargs)
        except (ValueError, TypeError) as exc:
            raise DecodeError(str(exc), message_type=type(msg).__name__) from exc

    return wrapper


# domain -> wire

def storage_info_to_proto(info: StorageInfo) -> pb.StorageInfoProto:
    return pb.StorageInfoProto(
        layout_version=info.layout_version,
        namespace_id=info.namespace_id,
        cluster_id=info.cluster_id,
        c_time=info.c_time,
    )


def registration_to_proto(reg: NamenodeRegistration) -> pb.NamenodeRegistrationProto:
    return pb.NamenodeRegistrationProto(
        rpc_address=reg.rpc_address,
        http_address=reg.http_address,
        storage_info=storage_info_to_proto(reg.storage_info),
        role=NamenodeRole(reg.role).value,
    )


def datanode_id_to_proto(dn: DatanodeID) -> pb.DatanodeIDProto:
    return pb.DatanodeIDProto(
        ip_addr=dn.ip_addr,
        host_name=dn.host_name,
        storage_id=dn.storage_id,
        xfer_port=dn.xfer_port,
        info_port=dn.info_port,
        ipc_port=dn.ipc_port,
    )


def checkpoint_signature_to_proto(sig: CheckpointSignature) -> pb.CheckpointSignatureProto:
    return pb.CheckpointSignatureProto(
        block_pool_id=sig.block_pool_id,
        most_recent_checkpoint_txid=sig.most_recent_checkpoint_txid,
        cur_segment_txid=sig.cur_segment_txid,
        storage_info=storage_info_to_proto(sig.storage_info),
    )


def block_to_proto(block: Block) -> pb.BlockProto:
    return pb.BlockProto(
        block_id=block.block_id,
        generation_stamp=block.generation_stamp,
        num_bytes=block.num_bytes,
    )


def blocks_to_proto(blocks: BlocksWithLocations) -> pb.BlocksWithLocationsProto:
    return pb.BlocksWithLocationsProto(
        blocks=tuple(
            pb.BlockWithLocationsProto(block=block_to_proto(b.block), storage_ids=tuple(b.storage_ids))
            for b in blocks.blocks
        )
    )


def block_key_to_proto(key: BlockKey) -> pb.BlockKeyProto:
    return pb.BlockKeyProto(key_id=key.key_id, expiry_date=key.expiry_date, key_bytes=key.key_bytes)


def block_keys_to_proto(keys: ExportedBlockKeys) -> pb.ExportedBlockKeysProto:
    return pb.ExportedBlockKeysProto(
        is_block_token_enabled=keys.is_block_token_enabled,
        key_update_interval=keys.key_update_interval,
        token_lifetime=keys.token_lifetime,
        current_key=block_key_to_proto(keys.current_key),
        all_keys=tuple(block_key_to_proto(k) for k in keys.all_keys),
    )


def namespace_info_to_proto(info: NamespaceInfo) -> pb.NamespaceInfoProto:
    return pb.NamespaceInfoProto(
        build_version=info.build_version,
        block_pool_id=info.block_pool_id,
        storage_info=storage_info_to_proto(info.storage_info),
        software_version=info.software_version,
    )


def command_to_proto(cmd: NamenodeCommand) -> pb.NamenodeCommandProto:
    if isinstance(cmd, CheckpointCommand):
        return pb.NamenodeCommandProto(
            action=int(cmd.action),
            type="CheckpointCommand",
            checkpoint_cmd=pb.CheckpointCommandProto(
                signature=checkpoint_signature_to_proto(cmd.signature),
                need_to_return_image=cmd.need_to_return_image,
            ),
        )
    return pb.NamenodeCommandProto(action=int(cmd.action), type="NamenodeCommand")


def edit_log_manifest_to_proto(manifest: RemoteEditLogManifest) -> pb.RemoteEditLogManifestProto:
    return pb.RemoteEditLogManifestProto(
        logs=tuple(
            pb.RemoteEditLogProto(start_txid=log.start_txid, end_txid=log.end_txid, is_in_progress=log.in_progress)
            for log in manifest.logs
        )
    )


def protocol_signature_to_proto(sig: ProtocolSignature) -> pb.ProtocolSignatureProto:
    return pb.ProtocolSignatureProto(
        version=sig.version,
        methods=tuple(sig.methods) if sig.methods is not None else None,
    )


def get_blocks_request(datanode: DatanodeID, size: int) -> pb.GetBlocksRequest:
    return pb.GetBlocksRequest(datanode=datanode_id_to_proto(datanode), size=size)


def error_report_request(reg: NamenodeRegistration, error_code: int, msg: str) -> pb.ErrorReportRequest:
    return pb.ErrorReportRequest(registration=registration_to_proto(reg), error_code=int(error_code), msg=msg)


def register_request(reg: NamenodeRegistration) -> pb.RegisterRequest:
    return pb.RegisterRequest(registration=registration_to_proto(reg))


def start_checkpoint_request(reg: NamenodeRegistration) -> pb.StartCheckpointRequest:
    return pb.StartCheckpointRequest(registration=registration_to_proto(reg))


def end_checkpoint_request(reg: NamenodeRegistration, sig: CheckpointSignature) -> pb.EndCheckpointRequest:
    return pb.EndCheckpointRequest(
        registration=registration_to_proto(reg),
        signature=checkpoint_signature_to_proto(sig),
    )


def get_edit_log_manifest_request(since_txid: int) -> pb.GetEditLogManifestRequest:
    return pb.GetEditLogManifestRequest(since_txid=since_txid)


# wire -> domain

def storage_info_from_proto(msg: pb.StorageInfoProto) -> StorageInfo:
    return StorageInfo(
        layout_version=msg.layout_version,
        namespace_id=msg.namespace_id,
        cluster_id=msg.cluster_id,
        c_time=msg.c_time,
    )


@_decoder
def registration_from_proto(msg: pb.NamenodeRegistrationProto) -> NamenodeRegistration:
    return NamenodeRegistration(
        rpc_address=msg.rpc_address,
        http_address=msg.http_address,
        storage_info=storage_info_from_proto(msg.storage_info),
        role=NamenodeRole(msg.role),
    )


@_decoder
def datanode_id_from_proto(msg: pb.DatanodeIDProto) -> DatanodeID:
    return DatanodeID(
        ip_addr=msg.ip_addr,
        host_name=msg.host_name,
        storage_id=msg.storage_id,
        xfer_port=msg.xfer_port,
        info_port=msg.info_port,
        ipc_port=msg.ipc_port,
    )


def checkpoint_signature_from_proto(msg: pb.CheckpointSignatureProto) -> CheckpointSignature:
    return CheckpointSignature(
        layout_version=msg.storage_info.layout_version,
        namespace_id=msg.storage_info.namespace_id,
        c_time=msg.storage_info.c_time,
        most_recent_checkpoint_txid=msg.most_recent_checkpoint_txid,
        cur_segment_txid=msg.cur_segment_txid,
        cluster_id=msg.storage_info.cluster_id,
        block_pool_id=msg.block_pool_id,
    )


@_decoder
def blocks_from_proto(msg: pb.BlocksWithLocationsProto) -> BlocksWithLocations:
    return BlocksWithLocations(
        blocks=tuple(
            BlockWithLocations(
                block=Block(
                    block_id=b.block.block_id,
                    generation_stamp=b.block.generation_stamp,
                    num_bytes=b.block.num_bytes,
                ),
                storage_ids=tuple(b.storage_ids),
            )
            for b in msg.blocks
        )
    )


def block_key_from_proto(msg: pb.BlockKeyProto) -> BlockKey:
    return BlockKey(key_id=msg.key_id, expiry_date=msg.expiry_date, key_bytes=bytes(msg.key_bytes))


def block_keys_from_proto(msg: pb.ExportedBlockKeysProto) -> ExportedBlockKeys:
    return ExportedBlockKeys(
        is_block_token_enabled=msg.is_block_token_enabled,
        key_update_interval=msg.key_update_interval,
        token_lifetime=msg.token_lifetime,
        current_key=block_key_from_proto(msg.current_key),
        all_keys=tuple(block_key_from_proto(k) for k in msg.all_keys),
    )


def namespace_info_from_proto(msg: pb.NamespaceInfoProto) -> NamespaceInfo:
    return NamespaceInfo(
        storage_info=storage_info_from_proto(msg.storage_info),
        build_version=msg.build_version,
        block_pool_id=msg.block_pool_id,
        software_version=msg.software_version,
    )


@_decoder
def command_from_proto(msg: pb.NamenodeCommandProto) -> NamenodeCommand:
    action = NamenodeCommandAction(msg.action)
    if msg.type == "CheckpointCommand":
        if msg.checkpoint_cmd is None:
            raise DecodeError("CheckpointCommand without checkpoint_cmd", message_type=type(msg).__name__)
        return CheckpointCommand(
            action=action,
            signature=checkpoint_signature_from_proto(msg.checkpoint_cmd.signature),
            need_to_return_image=msg.checkpoint_cmd.need_to_return_image,
        )
    return NamenodeCommand(action=action)


@_decoder
def edit_log_manifest_from_proto(msg: pb.RemoteEditLogManifestProto) -> RemoteEditLogManifest:
    return RemoteEditLogManifest(
        logs=tuple(
            RemoteEditLog(start_txid=log.start_txid, end_txid=log.end_txid, in_progress=log.is_in_progress)
            for log in msg.logs
        )
    )


def protocol_signature_from_proto(msg: pb.ProtocolSignatureProto) -> ProtocolSignature:
    return ProtocolSignature(
        version=msg.version,
        methods=tuple(msg.methods) if msg.methods is not None else None,
    )

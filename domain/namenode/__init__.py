"""Namenode protocol domain exports."""
from .entity import (
    Block,
    BlockKey,
    BlocksWithLocations,
    BlockWithLocations,
    CheckpointCommand,
    CheckpointSignature,
    DatanodeID,
    ErrorReportCode,
    ExportedBlockKeys,
    NamenodeCommand,
    NamenodeCommandAction,
    NamenodeRegistration,
    NamenodeRole,
    NamespaceInfo,
    ProtocolOperation,
    ProtocolSignature,
    RemoteEditLog,
    RemoteEditLogManifest,
    StorageInfo,
)
from .protocol import PROTOCOL_NAME, PROTOCOL_VERSION, NamenodeProtocol

__all__ = [
    "Block",
    "BlockKey",
    "BlocksWithLocations",
    "BlockWithLocations",
    "CheckpointCommand",
    "CheckpointSignature",
    "DatanodeID",
    "ErrorReportCode",
    "ExportedBlockKeys",
    "NamenodeCommand",
    "NamenodeCommandAction",
    "NamenodeRegistration",
    "NamenodeRole",
    "NamespaceInfo",
    "ProtocolOperation",
    "ProtocolSignature",
    "RemoteEditLog",
    "RemoteEditLogManifest",
    "StorageInfo",
    "NamenodeProtocol",
    "PROTOCOL_NAME",
    "PROTOCOL_VERSION",
]

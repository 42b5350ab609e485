import pytest

from domain.common.exceptions import DecodeError
from domain.namenode.entity import (
    Block,
    BlockKey,
    BlocksWithLocations,
    BlockWithLocations,
    CheckpointCommand,
    CheckpointSignature,
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
from grpc_app.mappers import namenode as mapper
from grpc_app.messages import decode_message, encode_message
from grpc_app.messages import namenode as pb
from tests.fakes import STORAGE


BIG = 2 ** 63 - 1

STORAGE_VARIANTS = [
    STORAGE,
    StorageInfo(layout_version=0, namespace_id=0, cluster_id="", c_time=0),
    StorageInfo(layout_version=-66, namespace_id=BIG, cluster_id="集群-ü", c_time=BIG),
]

SIGNATURES = [
    CheckpointSignature(-60, 1234, 0, 100, 101, "CID-test", "BP-1"),
    CheckpointSignature(0, 0, 0, 0, 0),
    CheckpointSignature(-66, BIG, BIG, -1, BIG, "集群", "BP-ü-10.0.0.1-1700000000000"),
]


def _over_the_wire(msg):
    """Encode then decode, as the stub and server do."""
    return decode_message(type(msg), encode_message(msg))


@pytest.mark.parametrize("role", list(NamenodeRole))
@pytest.mark.parametrize("storage", STORAGE_VARIANTS)
def test_registration_round_trip(role, storage):
    registration = NamenodeRegistration("nn-1:8020", "nn-1:9870", storage, role)
    msg = _over_the_wire(mapper.registration_to_proto(registration))
    assert mapper.registration_from_proto(msg) == registration


def test_datanode_round_trip(datanode):
    msg = _over_the_wire(mapper.datanode_id_to_proto(datanode))
    assert mapper.datanode_id_from_proto(msg) == datanode


@pytest.mark.parametrize("signature", SIGNATURES)
def test_checkpoint_signature_passes_through_unchanged(signature):
    msg = _over_the_wire(mapper.checkpoint_signature_to_proto(signature))
    decoded = mapper.checkpoint_signature_from_proto(msg)
    assert decoded == signature
    assert decoded.block_pool_id == signature.block_pool_id
    assert decoded.storage_info == signature.storage_info


@pytest.mark.parametrize(
    "blocks",
    [
        BlocksWithLocations(),
        BlocksWithLocations(blocks=(
            BlockWithLocations(Block(1, 1001, 128), ("DS-1", "DS-2")),
            BlockWithLocations(Block(2, 1002, 0), ()),
        )),
        BlocksWithLocations(blocks=(BlockWithLocations(Block(-BIG, BIG, BIG), ("DS-ü",)),)),
    ],
)
def test_blocks_with_locations_round_trip(blocks):
    msg = _over_the_wire(mapper.blocks_to_proto(blocks))
    assert mapper.blocks_from_proto(msg) == blocks


@pytest.mark.parametrize(
    "current,others,enabled",
    [
        (BlockKey(7, 1_700_000_000_000, b"\x00\xffsecret"), (BlockKey(6, 1_699_999_000_000, b"old"),), True),
        (BlockKey(0, 0), (), False),
        (BlockKey(-1, BIG, bytes(range(256))), (), True),
    ],
)
def test_block_keys_round_trip_preserves_key_bytes(current, others, enabled):
    keys = ExportedBlockKeys(
        is_block_token_enabled=enabled,
        key_update_interval=600_000,
        token_lifetime=600_000,
        current_key=current,
        all_keys=(current,) + others,
    )
    msg = _over_the_wire(mapper.block_keys_to_proto(keys))
    assert mapper.block_keys_from_proto(msg) == keys


@pytest.mark.parametrize("storage", STORAGE_VARIANTS)
@pytest.mark.parametrize("build_version,software_version", [("r1", "3.4.0"), ("", ""), ("修订-1", "3.4.0-ü")])
def test_namespace_info_round_trip(storage, build_version, software_version):
    info = NamespaceInfo(
        storage_info=storage,
        build_version=build_version,
        block_pool_id="BP-1",
        software_version=software_version,
    )
    msg = _over_the_wire(mapper.namespace_info_to_proto(info))
    assert mapper.namespace_info_from_proto(msg) == info


@pytest.mark.parametrize(
    "action", [a for a in NamenodeCommandAction if a is not NamenodeCommandAction.CHECKPOINT]
)
def test_plain_command_round_trip(action):
    cmd = NamenodeCommand(action=action)
    assert mapper.command_from_proto(_over_the_wire(mapper.command_to_proto(cmd))) == cmd


@pytest.mark.parametrize("need_to_return_image", [True, False])
@pytest.mark.parametrize("signature", SIGNATURES)
def test_checkpoint_command_round_trip(signature, need_to_return_image):
    cmd = CheckpointCommand(
        action=NamenodeCommandAction.CHECKPOINT,
        signature=signature,
        need_to_return_image=need_to_return_image,
    )
    decoded = mapper.command_from_proto(_over_the_wire(mapper.command_to_proto(cmd)))
    assert isinstance(decoded, CheckpointCommand)
    assert decoded == cmd


@pytest.mark.parametrize(
    "logs",
    [
        (),
        (RemoteEditLog(1, 1),),
        (RemoteEditLog(1, 100), RemoteEditLog(101, 200), RemoteEditLog(201, -1, in_progress=True)),
        (RemoteEditLog(BIG - 10, BIG - 5), RemoteEditLog(BIG - 4, BIG)),
    ],
)
def test_edit_log_manifest_round_trip(logs):
    manifest = RemoteEditLogManifest(logs=logs)
    msg = _over_the_wire(mapper.edit_log_manifest_to_proto(manifest))
    assert mapper.edit_log_manifest_from_proto(msg) == manifest


@pytest.mark.parametrize(
    "sig",
    [
        ProtocolSignature(version=6, methods=(11, -22, 33)),
        ProtocolSignature(version=6),
        ProtocolSignature(version=0, methods=()),
        ProtocolSignature(version=BIG, methods=(-(2 ** 31), 2 ** 31 - 1)),
    ],
)
def test_protocol_signature_round_trip(sig):
    assert mapper.protocol_signature_from_proto(_over_the_wire(mapper.protocol_signature_to_proto(sig))) == sig


def test_block_entry_missing_required_field_is_rejected():
    # second entry lacks generation_stamp
    payload = (
        b'{"blocks": {"blocks": ['
        b'{"block": {"block_id": 1, "generation_stamp": 1, "num_bytes": 1}, "storage_ids": ["DS-1"]},'
        b'{"block": {"block_id": 2, "num_bytes": 1}, "storage_ids": []}'
        b']}}'
    )
    with pytest.raises(DecodeError) as ei:
        decode_message(pb.GetBlocksResponse, payload)
    assert ei.value.message_type == "GetBlocksResponse"
    assert "generation_stamp" in ei.value.message


def test_garbage_payload_is_a_decode_error():
    with pytest.raises(DecodeError):
        decode_message(pb.GetTransactionIdResponse, b"\x00not-json")


@pytest.mark.parametrize(
    "message_type,payload",
    [
        (pb.GetTransactionIdResponse, b'{"tx_id": "42"}'),
        (pb.GetTransactionIdResponse, b'{"tx_id": 42.0}'),
        (pb.GetTransactionIdResponse, b'{"tx_id": true}'),
        (pb.GetEditLogManifestResponse, b'{"manifest": {"logs": [{"start_txid": 1, "end_txid": "9"}]}}'),
        (
            pb.GetBlockKeysResponse,
            b'{"keys": {"is_block_token_enabled": "yes", "key_update_interval": 1,'
            b' "token_lifetime": 1, "current_key": {"key_id": 7, "expiry_date": 1}}}',
        ),
        (
            pb.GetBlockKeysResponse,
            b'{"keys": {"is_block_token_enabled": true, "key_update_interval": 1,'
            b' "token_lifetime": 1, "current_key": {"key_id": "7", "expiry_date": 1}}}',
        ),
        (pb.GetProtocolVersionResponse, b'{"version": null}'),
    ],
)
def test_ill_typed_values_are_not_coerced(message_type, payload):
    with pytest.raises(DecodeError) as ei:
        decode_message(message_type, payload)
    assert ei.value.message_type == message_type.__name__


def test_strict_decoding_keeps_json_native_shapes():
    payload = (
        b'{"keys": {"is_block_token_enabled": true, "key_update_interval": 1, "token_lifetime": 2,'
        b' "current_key": {"key_id": 7, "expiry_date": 9, "key_bytes": "AP8="},'
        b' "all_keys": [{"key_id": 7, "expiry_date": 9, "key_bytes": "AP8="}]}}'
    )
    keys = mapper.block_keys_from_proto(decode_message(pb.GetBlockKeysResponse, payload).keys)
    assert keys.current_key.key_bytes == b"\x00\xff"
    assert keys.all_keys == (keys.current_key,)


def test_unknown_command_action_is_a_decode_error():
    msg = pb.NamenodeCommandProto(action=99, type="NamenodeCommand")
    with pytest.raises(DecodeError):
        mapper.command_from_proto(msg)


def test_checkpoint_command_without_body_is_a_decode_error():
    msg = pb.NamenodeCommandProto(action=int(NamenodeCommandAction.CHECKPOINT), type="CheckpointCommand")
    with pytest.raises(DecodeError):
        mapper.command_from_proto(msg)


def test_overlapping_manifest_is_a_decode_error():
    msg = pb.RemoteEditLogManifestProto(logs=(
        pb.RemoteEditLogProto(start_txid=1, end_txid=100),
        pb.RemoteEditLogProto(start_txid=50, end_txid=150),
    ))
    with pytest.raises(DecodeError):
        mapper.edit_log_manifest_from_proto(msg)


def test_registration_with_empty_address_is_a_decode_error():
    msg = pb.NamenodeRegistrationProto(
        rpc_address="",
        http_address="backup-1:50105",
        storage_info=mapper.storage_info_to_proto(STORAGE),
    )
    with pytest.raises(DecodeError):
        mapper.registration_from_proto(msg)


def test_parameterless_requests_are_immutable_constants():
    assert mapper.GET_BLOCK_KEYS == pb.GetBlockKeysRequest()
    with pytest.raises(Exception):
        mapper.GET_BLOCK_KEYS.extra = "x"  # type: ignore[attr-defined]
    assert encode_message(mapper.GET_TRANSACTION_ID) == b"{}"

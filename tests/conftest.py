"""Pytest bootstrap configuration.

Ensure logging-related environment variables are set before modules that
read application settings are imported.
"""
import os

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from concurrent import futures

import grpc
import pytest

from core.config import NamenodeSettings
from domain.namenode.entity import (
    CheckpointSignature,
    DatanodeID,
    NamenodeRegistration,
    NamenodeRole,
)
from tests.fakes import STORAGE, FakeNamenodeService, FakeTransport, RecordingSleep


@pytest.fixture
def registration() -> NamenodeRegistration:
    return NamenodeRegistration(
        rpc_address="backup-1:50100",
        http_address="backup-1:50105",
        storage_info=STORAGE,
        role=NamenodeRole.BACKUP,
    )


@pytest.fixture
def datanode() -> DatanodeID:
    return DatanodeID(
        ip_addr="10.0.0.7",
        host_name="dn-7",
        storage_id="DS-7",
        xfer_port=50010,
        info_port=50075,
        ipc_port=50020,
    )


@pytest.fixture
def signature() -> CheckpointSignature:
    return CheckpointSignature(
        layout_version=-60,
        namespace_id=1234,
        c_time=0,
        most_recent_checkpoint_txid=100,
        cur_segment_txid=101,
        cluster_id="CID-test",
        block_pool_id="BP-1",
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def namenode_server():
    """Start an in-process namenode on an ephemeral port.

    Yields (service, settings) so tests can script handlers and bind a client.
    """
    service = FakeNamenodeService()
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=4))
    server.add_generic_rpc_handlers((service.generic_handler(),))
    port = server.add_insecure_port("127.0.0.1:0")
    server.start()

    cfg = NamenodeSettings(
        host="127.0.0.1",
        port=port,
        timeout=5.0,
        user="backup",
        token="secret-token",
        lease_soft_limit_ms=10,
    )
    try:
        yield service, cfg
    finally:
        server.stop(grace=None)

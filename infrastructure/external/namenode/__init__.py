"""
Namenode 协议客户端模块

提供与 namenode 控制面协议集成的客户端实现
"""
from .client import NamenodeProtocolClient

__all__ = [
    "NamenodeProtocolClient",
]

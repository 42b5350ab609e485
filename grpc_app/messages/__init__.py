"""Wire message set and its JSON byte codec."""
from .codec import decode_message, encode_message
from .namenode import OPERATION_MESSAGES, WireMessage

__all__ = ["OPERATION_MESSAGES", "WireMessage", "decode_message", "encode_message"]

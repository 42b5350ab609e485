"""gRPC transport layer for the namenode protocol client.

This package hosts:
- The wire message set (in `messages/`) and its JSON byte codec.
- Request builders / response decoders (in `mappers/`).
- Client interceptors and the fault translator (in `interceptors/`).
- The transport stub and the retrying proxy wrapped around it.
"""

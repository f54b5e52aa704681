"""
Cache package for the Items Service.

Provides a Redis-backed gateway that stores serialized items under a
namespace with a fixed TTL.
"""

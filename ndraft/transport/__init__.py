"""Generation backend transport."""
from ndraft.transport.client import GenerateClient

__all__ = ["GenerateClient"]

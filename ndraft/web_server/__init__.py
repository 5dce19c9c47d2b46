"""Web server package."""
from ndraft.web_server.web_server import NdraftWebServer

__all__ = ["NdraftWebServer"]

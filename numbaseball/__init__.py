"""Two-player networked number baseball game: protocol, game logic, screens, server and client."""

__version__ = "0.1.0"
__all__ = ["protocol", "ui", "game", "server", "client"]
from app.models.server import Base, Server, ServerStatus, User, Vote
from app.models.server_request import RequestStatus, ServerRequest

__all__ = [
    "Base", "Server", "ServerStatus", "User", "Vote",
    "RequestStatus", "ServerRequest",
]

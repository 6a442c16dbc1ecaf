from .errors import ClientTimeoutError, InvalidIdError, LoginFailedError, UnifiError, UnifiHttpError
from .models import PortForward, PortForwardForm
from .options import ClientOptions, Credentials
from .session_cache import SessionCache
from .session_manager import Session, SessionManager
from .unifi_client import UnifiClient

__all__ = [
    "ClientOptions",
    "ClientTimeoutError",
    "Credentials",
    "InvalidIdError",
    "LoginFailedError",
    "PortForward",
    "PortForwardForm",
    "Session",
    "SessionCache",
    "SessionManager",
    "UnifiClient",
    "UnifiError",
    "UnifiHttpError",
]

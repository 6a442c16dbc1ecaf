from .port_forward import PortForward, PortForwardForm

__all__ = [
    "PortForward",
    "PortForwardForm",
]

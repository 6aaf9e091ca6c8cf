"""
SmartModel Adapters

Framework integrations supplying the ambient input source.
"""

from .input import ArrayInput, InputSource, get_current_input, use_input
from .starlette import RequestInput, bind_request

__all__ = [
    "ArrayInput",
    "InputSource",
    "get_current_input",
    "use_input",
    "RequestInput",
    "bind_request",
]

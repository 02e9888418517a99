from .exceptions import DecodeError as DecodeError
from .exceptions import InvalidRequestError as InvalidRequestError
from .exceptions import ReqEnumError as ReqEnumError
from .exceptions import SerializationError as SerializationError
from .exceptions import TransportError as TransportError
from .http import AuthMethod as AuthMethod
from .http import BasicAuth as BasicAuth
from .http import BearerAuth as BearerAuth
from .http import CustomAuth as CustomAuth
from .http import HTTPBody as HTTPBody
from .http import HTTPMethod as HTTPMethod
from .jsonrpc import JsonRpcErrorResponse as JsonRpcErrorResponse
from .jsonrpc import JsonRpcRequest as JsonRpcRequest
from .jsonrpc import JsonRpcResponse as JsonRpcResponse
from .jsonrpc import JsonRpcResult as JsonRpcResult
from .provider import Provider as Provider
from .target import JsonRpcCall as JsonRpcCall
from .target import JsonRpcTarget as JsonRpcTarget
from .target import Target as Target

__all__ = [
    "Provider",
    "Target",
    "JsonRpcTarget",
    "JsonRpcCall",
    "HTTPMethod",
    "HTTPBody",
    "AuthMethod",
    "BasicAuth",
    "BearerAuth",
    "CustomAuth",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcErrorResponse",
    "JsonRpcResult",
    "ReqEnumError",
    "InvalidRequestError",
    "SerializationError",
    "TransportError",
    "DecodeError",
]

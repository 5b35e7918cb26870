"""Message types, payload kinds and the JSON payloads carried by session messages."""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional

INPUT_STREAM_MESSAGE = "input_stream_data"
OUTPUT_STREAM_MESSAGE = "output_stream_data"
ACKNOWLEDGE_MESSAGE = "acknowledge"
CHANNEL_CLOSED_MESSAGE = "channel_closed"
START_PUBLICATION_MESSAGE = "start_publication"
PAUSE_PUBLICATION_MESSAGE = "pause_publication"

_INT64 = (-(2**63), 2**63 - 1)
_UINT32 = (0, 2**32 - 1)


class PayloadType(IntEnum):
    OUTPUT = 1
    ERROR = 2
    SIZE = 3
    PARAMETER = 4
    HANDSHAKE_REQUEST = 5
    HANDSHAKE_RESPONSE = 6
    HANDSHAKE_COMPLETE = 7
    ENC_CHALLENGE_REQUEST = 8
    ENC_CHALLENGE_RESPONSE = 9
    FLAG = 10
    STDERR = 11
    EXIT_CODE = 12


class PayloadTypeFlag(IntEnum):
    DISCONNECT_TO_PORT = 1
    TERMINATE_SESSION = 2
    CONNECT_TO_PORT_ERROR = 3


class ActionType(str, Enum):
    KMS_ENCRYPTION = "KMSEncryption"
    SESSION_TYPE = "SessionType"


class ActionStatus(IntEnum):
    SUCCESS = 1
    FAILED = 2
    UNSUPPORTED = 3


# --- decoding helpers -------------------------------------------------------

def _require_object(data: Any, name: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"cannot decode {type(data).__name__} into {name}")
    return data


def _lookup(data: Mapping, key: str) -> Any:
    if key in data:
        return data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return None


def _string(data: Mapping, key: str) -> str:
    value = _lookup(data, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key} must be a string, got {type(value).__name__}")
    return value


def _optional_string(data: Mapping, key: str) -> Optional[str]:
    value = _lookup(data, key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key} must be a string, got {type(value).__name__}")
    return value


def _integer(data: Mapping, key: str, bounds: tuple[int, int] = _INT64) -> int:
    value = _lookup(data, key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key} must be an integer, got {value!r}")
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"field {key} value {value} is out of range")
    return value


def _boolean(data: Mapping, key: str) -> bool:
    value = _lookup(data, key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key} must be a boolean, got {value!r}")
    return value


def _binary(data: Mapping, key: str) -> bytes:
    value = _lookup(data, key)
    if value is None:
        return b""
    if not isinstance(value, str):
        raise ValueError(f"field {key} must be a base64 string, got {type(value).__name__}")
    try:
        return base64.b64decode(value.replace("\r", "").replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"field {key} is not valid base64: {exc}") from exc


def _array(data: Mapping, key: str) -> list:
    value = _lookup(data, key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key} must be an array, got {type(value).__name__}")
    return value


def _action_type(value: str) -> str:
    try:
        return ActionType(value)
    except ValueError:
        return value


def _action_status(value: int) -> int:
    try:
        return ActionStatus(value)
    except ValueError:
        return value


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _b64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


# --- payloads ---------------------------------------------------------------

@dataclass
class AcknowledgeContent:
    """Tells the sender of a message that it has been received."""

    message_type: str = ""
    message_id: str = ""
    sequence_number: int = 0
    is_sequential_message: bool = False

    def to_dict(self) -> dict:
        return {
            "AcknowledgedMessageType": self.message_type,
            "AcknowledgedMessageId": self.message_id,
            "AcknowledgedMessageSequenceNumber": self.sequence_number,
            "IsSequentialMessage": self.is_sequential_message,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "AcknowledgeContent":
        data = _require_object(data, cls.__name__)
        return cls(
            message_type=_string(data, "AcknowledgedMessageType"),
            message_id=_string(data, "AcknowledgedMessageId"),
            sequence_number=_integer(data, "AcknowledgedMessageSequenceNumber"),
            is_sequential_message=_boolean(data, "IsSequentialMessage"),
        )


@dataclass
class ChannelClosed:
    """Tells the client to close the channel."""

    message_id: str = ""
    created_date: str = ""
    destination_id: str = ""
    session_id: str = ""
    message_type: str = ""
    schema_version: int = 0
    output: str = ""

    def to_dict(self) -> dict:
        return {
            "MessageId": self.message_id,
            "CreatedDate": self.created_date,
            "DestinationId": self.destination_id,
            "SessionId": self.session_id,
            "MessageType": self.message_type,
            "SchemaVersion": self.schema_version,
            "Output": self.output,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ChannelClosed":
        data = _require_object(data, cls.__name__)
        return cls(
            message_id=_string(data, "MessageId"),
            created_date=_string(data, "CreatedDate"),
            destination_id=_string(data, "DestinationId"),
            session_id=_string(data, "SessionId"),
            message_type=_string(data, "MessageType"),
            schema_version=_integer(data, "SchemaVersion"),
            output=_string(data, "Output"),
        )


@dataclass
class SizeData:
    """Terminal dimensions."""

    cols: int = 0
    rows: int = 0

    def to_dict(self) -> dict:
        return {"cols": self.cols, "rows": self.rows}

    @classmethod
    def from_dict(cls, data: Any) -> "SizeData":
        data = _require_object(data, cls.__name__)
        return cls(
            cols=_integer(data, "cols", _UINT32),
            rows=_integer(data, "rows", _UINT32),
        )


@dataclass
class KMSEncryptionRequest:
    """Sent by the agent to initialise KMS encryption."""

    kms_key_id: str = ""

    def to_dict(self) -> dict:
        return {"KMSKeyId": self.kms_key_id}

    @classmethod
    def from_dict(cls, data: Any) -> "KMSEncryptionRequest":
        data = _require_object(data, cls.__name__)
        return cls(kms_key_id=_string(data, "KMSKeyId"))


@dataclass
class KMSEncryptionResponse:
    """Returned to the agent to set up KMS encryption."""

    kms_cipher_text_key: bytes = b""
    kms_cipher_text_hash: bytes = b""

    def to_dict(self) -> dict:
        return {
            "KMSCipherTextKey": _b64(self.kms_cipher_text_key),
            "KMSCipherTextHash": _b64(self.kms_cipher_text_hash),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "KMSEncryptionResponse":
        data = _require_object(data, cls.__name__)
        return cls(
            kms_cipher_text_key=_binary(data, "KMSCipherTextKey"),
            kms_cipher_text_hash=_binary(data, "KMSCipherTextHash"),
        )


@dataclass
class SessionTypeRequest:
    """Type of session to launch and the properties for its plugin."""

    session_type: str = ""
    properties: Any = None

    def to_dict(self) -> dict:
        return {"SessionType": self.session_type, "Properties": self.properties}

    @classmethod
    def from_dict(cls, data: Any) -> "SessionTypeRequest":
        data = _require_object(data, cls.__name__)
        return cls(
            session_type=_string(data, "SessionType"),
            properties=_lookup(data, "Properties"),
        )


@dataclass
class RequestedClientAction:
    """An action the agent asks the client to perform."""

    action_type: str = ""
    action_parameters: Any = None

    def to_dict(self) -> dict:
        return {
            "ActionType": _plain(self.action_type),
            "ActionParameters": self.action_parameters,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "RequestedClientAction":
        data = _require_object(data, cls.__name__)
        return cls(
            action_type=_action_type(_string(data, "ActionType")),
            action_parameters=_lookup(data, "ActionParameters"),
        )


@dataclass
class HandshakeRequestPayload:
    """Handshake request sent by the agent."""

    agent_version: str = ""
    requested_client_actions: list[RequestedClientAction] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "AgentVersion": self.agent_version,
            "RequestedClientActions": [a.to_dict() for a in self.requested_client_actions],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "HandshakeRequestPayload":
        data = _require_object(data, cls.__name__)
        return cls(
            agent_version=_string(data, "AgentVersion"),
            requested_client_actions=[
                RequestedClientAction.from_dict(item)
                for item in _array(data, "RequestedClientActions")
            ],
        )


@dataclass
class ProcessedClientAction:
    """The outcome of a requested action."""

    action_type: str = ""
    action_status: int = 0
    action_result: Any = None
    error: str = ""

    def to_dict(self) -> dict:
        return {
            "ActionType": _plain(self.action_type),
            "ActionStatus": _plain(self.action_status),
            "ActionResult": self.action_result,
            "Error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ProcessedClientAction":
        data = _require_object(data, cls.__name__)
        return cls(
            action_type=_action_type(_string(data, "ActionType")),
            action_status=_action_status(_integer(data, "ActionStatus")),
            action_result=_lookup(data, "ActionResult"),
            error=_string(data, "Error"),
        )


@dataclass
class HandshakeResponsePayload:
    """Handshake response sent back to the agent."""

    client_version: str = ""
    processed_client_actions: list[ProcessedClientAction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "ClientVersion": self.client_version,
            "ProcessedClientActions": [a.to_dict() for a in self.processed_client_actions],
            "Errors": list(self.errors),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "HandshakeResponsePayload":
        data = _require_object(data, cls.__name__)
        errors = _array(data, "Errors")
        if not all(isinstance(item, str) for item in errors):
            raise ValueError("field Errors must hold only strings")
        return cls(
            client_version=_string(data, "ClientVersion"),
            processed_client_actions=[
                ProcessedClientAction.from_dict(item)
                for item in _array(data, "ProcessedClientActions")
            ],
            errors=errors,
        )


@dataclass
class EncryptionChallengeRequest:
    """Data encrypted by the agent that the client must decrypt and re-encrypt."""

    challenge: bytes = b""

    def to_dict(self) -> dict:
        return {"Challenge": _b64(self.challenge)}

    @classmethod
    def from_dict(cls, data: Any) -> "EncryptionChallengeRequest":
        data = _require_object(data, cls.__name__)
        return cls(challenge=_binary(data, "Challenge"))


@dataclass
class EncryptionChallengeResponse:
    """The challenge re-encrypted by the client."""

    challenge: bytes = b""

    def to_dict(self) -> dict:
        return {"Challenge": _b64(self.challenge)}

    @classmethod
    def from_dict(cls, data: Any) -> "EncryptionChallengeResponse":
        data = _require_object(data, cls.__name__)
        return cls(challenge=_binary(data, "Challenge"))


@dataclass
class HandshakeCompletePayload:
    """Signals that the handshake is complete.

    ``handshake_time_to_complete`` is in nanoseconds.
    """

    handshake_time_to_complete: int = 0
    customer_message: str = ""

    def to_dict(self) -> dict:
        return {
            "HandshakeTimeToComplete": self.handshake_time_to_complete,
            "CustomerMessage": self.customer_message,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "HandshakeCompletePayload":
        data = _require_object(data, cls.__name__)
        return cls(
            handshake_time_to_complete=_integer(data, "HandshakeTimeToComplete"),
            customer_message=_string(data, "CustomerMessage"),
        )


@dataclass
class OpenDataChannelInput:
    """Request body that opens a data channel."""

    message_schema_version: Optional[str] = None
    request_id: Optional[str] = None
    token_value: Optional[str] = None
    client_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "MessageSchemaVersion": self.message_schema_version,
            "RequestId": self.request_id,
            "TokenValue": self.token_value,
            "ClientId": self.client_id,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "OpenDataChannelInput":
        data = _require_object(data, cls.__name__)
        return cls(
            message_schema_version=_optional_string(data, "MessageSchemaVersion"),
            request_id=_optional_string(data, "RequestId"),
            token_value=_optional_string(data, "TokenValue"),
            client_id=_optional_string(data, "ClientId"),
        )


def _encode_default(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return _b64(bytes(obj))
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def serialize_payload(obj: Any) -> bytes:
    """Encode a payload object (or plain JSON value) as compact JSON bytes."""
    text = json.dumps(
        obj, default=_encode_default, separators=(",", ":"), ensure_ascii=False
    )
    return text.encode("utf-8")
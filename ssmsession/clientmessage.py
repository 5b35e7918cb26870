"""The binary client message exchanged over a session data channel."""

from __future__ import annotations

import hashlib
import json
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from .binary import (
    FieldError,
    get_bytes,
    get_long,
    get_string,
    get_uinteger,
    get_ulong,
    get_uuid,
    put_bytes,
    put_long,
    put_string,
    put_uinteger,
    put_ulong,
    put_uuid,
)
from .payloads import (
    ACKNOWLEDGE_MESSAGE,
    CHANNEL_CLOSED_MESSAGE,
    PAUSE_PUBLICATION_MESSAGE,
    START_PUBLICATION_MESSAGE,
    AcknowledgeContent,
    ChannelClosed,
    HandshakeCompletePayload,
    HandshakeRequestPayload,
    PayloadType,
    serialize_payload,
)

HL_LENGTH = 4
MESSAGE_TYPE_LENGTH = 32
SCHEMA_VERSION_LENGTH = 4
CREATED_DATE_LENGTH = 8
SEQUENCE_NUMBER_LENGTH = 8
FLAGS_LENGTH = 8
MESSAGE_ID_LENGTH = 16
PAYLOAD_DIGEST_LENGTH = 32
PAYLOAD_TYPE_LENGTH = 4
PAYLOAD_LENGTH_LENGTH = 4

HL_OFFSET = 0
MESSAGE_TYPE_OFFSET = HL_OFFSET + HL_LENGTH
SCHEMA_VERSION_OFFSET = MESSAGE_TYPE_OFFSET + MESSAGE_TYPE_LENGTH
CREATED_DATE_OFFSET = SCHEMA_VERSION_OFFSET + SCHEMA_VERSION_LENGTH
SEQUENCE_NUMBER_OFFSET = CREATED_DATE_OFFSET + CREATED_DATE_LENGTH
FLAGS_OFFSET = SEQUENCE_NUMBER_OFFSET + SEQUENCE_NUMBER_LENGTH
MESSAGE_ID_OFFSET = FLAGS_OFFSET + FLAGS_LENGTH
PAYLOAD_DIGEST_OFFSET = MESSAGE_ID_OFFSET + MESSAGE_ID_LENGTH
PAYLOAD_TYPE_OFFSET = PAYLOAD_DIGEST_OFFSET + PAYLOAD_DIGEST_LENGTH
PAYLOAD_LENGTH_OFFSET = PAYLOAD_TYPE_OFFSET + PAYLOAD_TYPE_LENGTH
PAYLOAD_OFFSET = PAYLOAD_LENGTH_OFFSET + PAYLOAD_LENGTH_LENGTH

_T = TypeVar("_T")


class MessageError(ValueError):
    """Raised when a client message is invalid or cannot be (de)serialized."""


def _decode_json(payload: bytes, factory: Callable[[Any], _T]) -> _T:
    try:
        return factory(json.loads(bytes(payload)))
    except (ValueError, UnicodeDecodeError) as exc:
        raise MessageError(f"Could not deserialize rawMessage: {exc}") from exc


@dataclass
class ClientMessage:
    """A framed message: a fixed-size header followed by a variable payload.

    Layout: header length, message type (32 bytes), schema version,
    created date (epoch millis), sequence number, flags, message id,
    SHA-256 payload digest, payload type, payload length, payload.
    """

    header_length: int = 0
    message_type: str = ""
    schema_version: int = 0
    created_date: int = 0
    sequence_number: int = 0
    flags: int = 0
    message_id: Optional[uuid.UUID] = None
    payload_digest: bytes = b""
    payload_type: int = 0
    payload_length: int = 0
    payload: bytes = b""

    def validate(self) -> None:
        """Raise MessageError if the message is not well formed."""
        if self.message_type in (START_PUBLICATION_MESSAGE, PAUSE_PUBLICATION_MESSAGE):
            return
        if self.header_length == 0:
            raise MessageError("HeaderLength cannot be zero")
        if not self.message_type:
            raise MessageError("MessageType is missing")
        if self.created_date == 0:
            raise MessageError("CreatedDate is missing")
        if self.payload_length != 0:
            digest = hashlib.sha256(bytes(self.payload)).digest()
            if digest != bytes(self.payload_digest):
                raise MessageError("payload Hash is not valid")

    def serialize(self) -> bytes:
        """Encode the message; sets ``payload_length`` from the payload."""
        payload = bytes(self.payload)
        self.payload_length = len(payload)
        header_length = PAYLOAD_LENGTH_OFFSET
        result = bytearray(header_length + PAYLOAD_LENGTH_LENGTH + len(payload))
        try:
            put_uinteger(result, HL_OFFSET, header_length)
            put_string(
                result,
                MESSAGE_TYPE_OFFSET,
                MESSAGE_TYPE_OFFSET + MESSAGE_TYPE_LENGTH - 1,
                self.message_type,
            )
            put_uinteger(result, SCHEMA_VERSION_OFFSET, self.schema_version)
            put_ulong(result, CREATED_DATE_OFFSET, self.created_date)
            put_long(result, SEQUENCE_NUMBER_OFFSET, self.sequence_number)
            put_ulong(result, FLAGS_OFFSET, self.flags)
            put_uuid(result, MESSAGE_ID_OFFSET, self.message_id)
            put_bytes(
                result,
                PAYLOAD_DIGEST_OFFSET,
                PAYLOAD_DIGEST_OFFSET + PAYLOAD_DIGEST_LENGTH - 1,
                hashlib.sha256(payload).digest(),
            )
            put_uinteger(result, PAYLOAD_TYPE_OFFSET, self.payload_type)
            put_uinteger(result, PAYLOAD_LENGTH_OFFSET, self.payload_length)
            put_bytes(result, PAYLOAD_OFFSET, PAYLOAD_OFFSET + len(payload) - 1, payload)
        except FieldError as exc:
            raise MessageError(f"Could not serialize client message: {exc}") from exc
        return bytes(result)

    @classmethod
    def deserialize(cls, data: bytes) -> "ClientMessage":
        """Decode a message from its wire form."""
        try:
            header_length = get_uinteger(data, HL_OFFSET)
            return cls(
                header_length=header_length,
                message_type=get_string(data, MESSAGE_TYPE_OFFSET, MESSAGE_TYPE_LENGTH),
                schema_version=get_uinteger(data, SCHEMA_VERSION_OFFSET),
                created_date=get_ulong(data, CREATED_DATE_OFFSET),
                sequence_number=get_long(data, SEQUENCE_NUMBER_OFFSET),
                flags=get_ulong(data, FLAGS_OFFSET),
                message_id=get_uuid(data, MESSAGE_ID_OFFSET),
                payload_digest=get_bytes(data, PAYLOAD_DIGEST_OFFSET, PAYLOAD_DIGEST_LENGTH),
                payload_type=get_uinteger(data, PAYLOAD_TYPE_OFFSET),
                payload_length=get_uinteger(data, PAYLOAD_LENGTH_OFFSET),
                payload=bytes(data[header_length + PAYLOAD_LENGTH_LENGTH:]),
            )
        except FieldError as exc:
            raise MessageError(f"Could not deserialize client message: {exc}") from exc

    def deserialize_acknowledge_content(self) -> AcknowledgeContent:
        """Parse the payload of an acknowledge message."""
        if self.message_type != ACKNOWLEDGE_MESSAGE:
            raise MessageError(
                "ClientMessage is not of type AcknowledgeMessage. "
                f"Found message type: {self.message_type}"
            )
        return _decode_json(self.payload, AcknowledgeContent.from_dict)

    def deserialize_channel_closed(self) -> ChannelClosed:
        """Parse the payload of a channel-closed message."""
        if self.message_type != CHANNEL_CLOSED_MESSAGE:
            raise MessageError(
                "ClientMessage is not of type ChannelClosed. "
                f"Found message type: {self.message_type}"
            )
        return _decode_json(self.payload, ChannelClosed.from_dict)

    def deserialize_handshake_request(self) -> HandshakeRequestPayload:
        """Parse a handshake request payload."""
        if self.payload_type != PayloadType.HANDSHAKE_REQUEST:
            raise MessageError(
                "ClientMessage PayloadType is not of type HandshakeRequestPayloadType. "
                f"Found payload type: {self.payload_type}"
            )
        return _decode_json(self.payload, HandshakeRequestPayload.from_dict)

    def deserialize_handshake_complete(self) -> HandshakeCompletePayload:
        """Parse a handshake complete payload."""
        if self.payload_type != PayloadType.HANDSHAKE_COMPLETE:
            raise MessageError(
                "ClientMessage PayloadType is not of type HandshakeCompletePayloadType. "
                f"Found payload type: {self.payload_type}"
            )
        return _decode_json(self.payload, HandshakeCompletePayload.from_dict)


def serialize_acknowledge_message(content: AcknowledgeContent) -> bytes:
    """Build and encode an acknowledge message carrying ``content``."""
    message = ClientMessage(
        message_type=ACKNOWLEDGE_MESSAGE,
        schema_version=1,
        created_date=time.time_ns() // 1_000_000,
        sequence_number=0,
        flags=3,
        message_id=uuid.uuid4(),
        payload=serialize_payload(content),
    )
    return message.serialize()
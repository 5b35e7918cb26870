# ssmsession

Building blocks for the client side of an interactive session data channel.
The package covers the binary message frame, the JSON payloads that travel
inside it, and retry helpers for reconnecting. It has no dependencies outside
the standard library.

## Modules

### `ssmsession.binary`

Big-endian readers and writers for fixed-width fields in a byte buffer:

- Readers: `get_string`, `get_integer`, `get_uinteger`, `get_long`, `get_ulong`,
  `get_uuid` and `get_bytes`. `get_string` strips NUL padding and surrounding
  whitespace.
- Writers: `put_string`, `put_bytes`, `put_integer`, `put_uinteger`, `put_long`,
  `put_ulong` and `put_uuid`. They write into a `bytearray`. `put_string` pads
  the rest of its field with spaces. `put_bytes` needs the value to fill the
  field exactly.
- Encoders: `integer_to_bytes` for 32-bit values and `long_to_bytes` for
  64-bit values.

UUIDs are stored as their low eight bytes followed by their high eight bytes.
`put_uuid` accepts a `uuid.UUID` or a string and rejects `None` and the nil
UUID.

Every function raises `FieldError`, a subclass of `ValueError`, in three cases:
an offset or range falls outside the buffer, a value does not fit its field,
or a value does not fit its width.

### `ssmsession.payloads`

- Message type names: `INPUT_STREAM_MESSAGE`, `OUTPUT_STREAM_MESSAGE`,
  `ACKNOWLEDGE_MESSAGE`, `CHANNEL_CLOSED_MESSAGE`, `START_PUBLICATION_MESSAGE`
  and `PAUSE_PUBLICATION_MESSAGE`.
- Enums: `PayloadType`, `PayloadTypeFlag`, `ActionType` and `ActionStatus`.
- Payload dataclasses: `AcknowledgeContent`, `ChannelClosed`, `SizeData`,
  `KMSEncryptionRequest`, `KMSEncryptionResponse`, `SessionTypeRequest`,
  `RequestedClientAction`, `HandshakeRequestPayload`, `ProcessedClientAction`,
  `HandshakeResponsePayload`, `EncryptionChallengeRequest`,
  `EncryptionChallengeResponse`, `HandshakeCompletePayload` and
  `OpenDataChannelInput`.

Each payload dataclass has `to_dict()` and a `from_dict()` classmethod, both
using the wire field names. When decoding:

- Keys are matched case-insensitively.
- A missing field takes its zero value.
- A field of the wrong type raises `ValueError`.
- Byte fields travel as base64.

`serialize_payload(obj)` encodes a payload object, or any plain JSON value, as
compact UTF-8 JSON bytes.

### `ssmsession.clientmessage`

`ClientMessage` is the binary frame. It holds these fields in order:

1. header length
2. 32-byte message type
3. schema version
4. created date (epoch milliseconds)
5. sequence number
6. flags
7. message id
8. SHA-256 payload digest
9. payload type
10. payload length
11. payload

Its methods:

- `serialize()` encodes the message. It computes the digest and sets
  `payload_length`.
- `ClientMessage.deserialize(data)` decodes a frame.
- `validate()` checks that the header length, message type and created date
  are set, and that the digest matches a non-empty payload. Start and pause
  publication messages are always valid.
- `deserialize_acknowledge_content()`, `deserialize_channel_closed()`,
  `deserialize_handshake_request()` and `deserialize_handshake_complete()`
  decode the payload. Each first checks the message type or payload type.

`serialize_acknowledge_message(content)` builds and encodes an acknowledge
message. It uses schema version 1, flags 3, a random message id and the
current time.

All of these raise `MessageError`, a subclass of `ValueError`.

### `ssmsession.retry`

- `retry(attempts, sleep, fn)` calls `fn` up to `attempts` times and doubles
  the pause after each failure. `sleep` is given in seconds or as a
  `timedelta`. It returns the first successful result, or re-raises the last
  error.
- `RepeatableExponentialRetryer` has `next_sleep_time(attempt)` and `call()`.
  It retries with delays of `initial_delay_in_milli * geometric_ratio ** attempt`.
  The schedule starts over once a delay would exceed `max_delay_in_milli`.
  After `max_attempts` retries it re-raises the error.
- `sdk_retry_delay(operation_name, error, retry_count)` returns the delay
  before retrying a service request, as a `timedelta`. A `GetMessages` call
  that failed with `Client.Timeout` waits 100 ms. Any other failure waits
  `2 ** retry_count` times a random 1000–1499 ms.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import uuid

from ssmsession.clientmessage import ClientMessage
from ssmsession.payloads import INPUT_STREAM_MESSAGE, PayloadType

message = ClientMessage(
    message_type=INPUT_STREAM_MESSAGE,
    schema_version=1,
    created_date=1503434274948,
    sequence_number=1,
    flags=0,
    message_id=uuid.uuid4(),
    payload_type=PayloadType.OUTPUT,
    payload=b"ls -la\n",
)
frame = message.serialize()

received = ClientMessage.deserialize(frame)
received.validate()
assert received.payload == b"ls -la\n"
```

Retrying a flaky operation on a capped exponential schedule:

```python
from ssmsession.retry import RepeatableExponentialRetryer

def connect():
    ...  # open the connection; raise on failure

retryer = RepeatableExponentialRetryer(
    callable_func=connect,
    geometric_ratio=2.0,
    initial_delay_in_milli=100,
    max_delay_in_milli=5000,
    max_attempts=5,
)
retryer.call()  # re-raises the last error once the attempts run out
```

## What this package does not do

This is a library of message and retry primitives only. It does not do any
of the following:

- open network or websocket connections
- call any remote service
- run shell or port-forwarding sessions
- handle KMS encryption
- provide a command-line program

Those parts have to be supplied by the application that uses it.
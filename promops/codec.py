"""Protobuf wire encoding for operations and batches.

The schema (``proto/promops/v1/prometheus.proto``) is registered at import
time in a private descriptor pool, so no generated ``_pb2`` module is needed.
Each metric kind has its own payload message with a kind-local action enum,
carried in a ``oneof`` on the operation message.
"""
from typing import Dict, Optional, Type

from google.protobuf import descriptor_pb2, descriptor_pool, json_format, message_factory
from google.protobuf.message import DecodeError, Message

from .logging_config import get_logger
from .batch import PrometheusOperations
from .config import Config
from .errors import OperationDecodeError
from .models import PAYLOAD_TYPES, MetricType, Operation


logger = get_logger(__name__)

PACKAGE = "promops.v1"
PROTO_FILE = "promops/v1/prometheus.proto"
BATCH_MESSAGE = f"{PACKAGE}.PrometheusOperations"

# oneof field name, field number and payload message per kind
PAYLOAD_FIELDS = {
    MetricType.GAUGE: ("gauge", 3, "GaugeOp"),
    MetricType.COUNTER: ("counter", 4, "CounterOp"),
    MetricType.HISTOGRAM: ("histogram", 5, "HistogramOp"),
    MetricType.SUMMARY: ("summary", 6, "SummaryOp"),
}
_KINDS_BY_FIELD = {field_name: kind for kind, (field_name, _, _) in PAYLOAD_FIELDS.items()}
_ONEOF = "operation"

_Field = descriptor_pb2.FieldDescriptorProto


def _build_schema() -> descriptor_pb2.FileDescriptorProto:
    """Describe the wire schema as a FileDescriptorProto"""
    schema = descriptor_pb2.FileDescriptorProto(name=PROTO_FILE, package=PACKAGE, syntax="proto3")

    for kind, (_, _, message_name) in PAYLOAD_FIELDS.items():
        payload = schema.message_type.add(name=message_name)
        enum = payload.enum_type.add(name="Operation")
        enum.value.add(name="OPERATION_UNSPECIFIED", number=0)
        for action in PAYLOAD_TYPES[kind].action_type:
            enum.value.add(name=f"OPERATION_{action.name}", number=int(action))
        payload.field.add(
            name="operation", number=1, json_name="operation",
            type=_Field.TYPE_ENUM, label=_Field.LABEL_OPTIONAL,
            type_name=f".{PACKAGE}.{message_name}.Operation",
        )
        payload.field.add(
            name="value", number=2, json_name="value",
            type=_Field.TYPE_DOUBLE, label=_Field.LABEL_OPTIONAL,
        )

    operation = schema.message_type.add(name="PrometheusOperation")
    entry = operation.nested_type.add(name="LabelsEntry")
    entry.options.map_entry = True
    entry.field.add(name="key", number=1, json_name="key", type=_Field.TYPE_STRING, label=_Field.LABEL_OPTIONAL)
    entry.field.add(name="value", number=2, json_name="value", type=_Field.TYPE_STRING, label=_Field.LABEL_OPTIONAL)
    operation.field.add(name="name", number=1, json_name="name", type=_Field.TYPE_STRING, label=_Field.LABEL_OPTIONAL)
    operation.field.add(
        name="labels", number=2, json_name="labels",
        type=_Field.TYPE_MESSAGE, label=_Field.LABEL_REPEATED,
        type_name=f".{PACKAGE}.PrometheusOperation.LabelsEntry",
    )
    operation.oneof_decl.add(name=_ONEOF)
    for field_name, number, message_name in sorted(PAYLOAD_FIELDS.values(), key=lambda f: f[1]):
        operation.field.add(
            name=field_name, number=number, json_name=field_name,
            type=_Field.TYPE_MESSAGE, label=_Field.LABEL_OPTIONAL,
            type_name=f".{PACKAGE}.{message_name}", oneof_index=0,
        )

    batch = schema.message_type.add(name="PrometheusOperations")
    batch.field.add(
        name="operations", number=1, json_name="operations",
        type=_Field.TYPE_MESSAGE, label=_Field.LABEL_REPEATED,
        type_name=f".{PACKAGE}.PrometheusOperation",
    )
    return schema


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_schema().SerializeToString())


def _message_class(name: str) -> Type[Message]:
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


PrometheusOperationsMessage = _message_class("PrometheusOperations")
PrometheusOperationMessage = _message_class("PrometheusOperation")
PAYLOAD_MESSAGES: Dict[MetricType, Type[Message]] = {
    kind: _message_class(message_name) for kind, (_, _, message_name) in PAYLOAD_FIELDS.items()
}


def encode_operation(operation: Operation) -> Message:
    """Convert an Operation to its protobuf message"""
    field_name = PAYLOAD_FIELDS[operation.kind][0]
    message = PrometheusOperationMessage(name=operation.name)
    for key, value in operation.labels.items():
        message.labels[str(key)] = str(value)
    payload = getattr(message, field_name)
    payload.SetInParent()
    payload.operation = int(operation.action)
    payload.value = operation.value
    return message


def decode_operation(message: Message) -> Operation:
    """Convert a protobuf operation message back to an Operation.

    Raises OperationDecodeError when the payload is missing, the action is
    unspecified, or the action code is not part of the payload kind.
    """
    field_name = message.WhichOneof(_ONEOF)
    if field_name is None:
        raise OperationDecodeError(f"Operation {message.name!r} carries no payload")

    kind = _KINDS_BY_FIELD[field_name]
    payload = getattr(message, field_name)
    payload_type = PAYLOAD_TYPES[kind]

    if payload.operation == 0:
        raise OperationDecodeError(f"Operation {message.name!r} has an unspecified {kind.value} action")
    try:
        action = payload_type.action_type(payload.operation)
    except ValueError:
        raise OperationDecodeError(
            f"Operation {message.name!r} has unknown {kind.value} action code {payload.operation}"
        ) from None

    return Operation(
        name=message.name,
        labels=dict(message.labels),
        payload=payload_type(value=payload.value, action=action),
    )


def _batch_message(batch: PrometheusOperations) -> Message:
    message = PrometheusOperationsMessage()
    for operation in batch:
        message.operations.add().CopyFrom(encode_operation(operation))
    return message


def encode_batch(batch: PrometheusOperations) -> bytes:
    """Serialize a batch; map entries are written in sorted key order"""
    message = _batch_message(batch)
    return message.SerializeToString(deterministic=True)


def decode_batch(data: bytes, strict: Optional[bool] = None) -> PrometheusOperations:
    """Parse a serialized batch.

    Undecodable operations are logged and skipped, unless ``strict`` is set,
    in which case the first one raises OperationDecodeError. When ``strict`` is
    not given, the ``strict_decode`` setting decides.
    """
    if strict is None:
        strict = Config().strict_decode

    message = PrometheusOperationsMessage()
    try:
        message.ParseFromString(data)
    except DecodeError as e:
        raise OperationDecodeError(f"Malformed operations batch: {e}") from e

    batch = PrometheusOperations()
    skipped = 0
    for index, operation_message in enumerate(message.operations):
        try:
            batch.push(decode_operation(operation_message))
        except OperationDecodeError as e:
            if strict:
                raise
            skipped += 1
            logger.warning("Skipping undecodable operation",
                           index=index,
                           name=operation_message.name,
                           error=str(e),
                           event_type="decode_skip")

    logger.debug("Decoded operations batch",
                 operations_count=len(batch),
                 skipped=skipped,
                 event_type="batch_decode")
    return batch


def batch_to_json(batch: PrometheusOperations) -> str:
    """Render a batch as protobuf JSON, for inspection and debugging"""
    message = _batch_message(batch)
    return json_format.MessageToJson(message, preserving_proto_field_name=True, sort_keys=True)

"""Wire messages exchanged with the orchestrator.

The orchestrator speaks protobuf (package `nexus.orchestrator`, proto3). The
schema is small, so the descriptors are assembled here at import time instead of
shipping generated `_pb2` modules:

    enum NodeType { WEB_PROVER = 0; CLI_PROVER = 1; }
    message GetProofTaskRequest  { string node_id = 1; NodeType node_type = 2; }
    message GetProofTaskResponse { string program_id = 1; bytes public_inputs = 2; }
    message NodeTelemetry {
      optional int64 flops_per_sec = 1;
      optional int64 memory_used = 2;
      optional int64 memory_capacity = 3;
      optional string location = 4;
    }
    message SubmitProofRequest {
      string node_id = 1;
      NodeType node_type = 2;
      string proof_hash = 3;
      bytes proof = 4;
      NodeTelemetry node_telemetry = 5;
    }
    message SubmitProofResponse {}

Callers never touch protobuf objects directly. Each message is a frozen pydantic
model with `to_bytes()` / `from_bytes()`; protobuf instances only live for the
duration of a single encode or decode.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, ClassVar, TypeVar

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message
from pydantic import BaseModel, ConfigDict, Field

PROTO_PACKAGE = "nexus.orchestrator"

# Coarse region reported with every proof submission.
DEFAULT_LOCATION = "US"

# Upper bound of the int64 telemetry fields on the wire.
INT64_MAX = 2**63 - 1


class NodeType(IntEnum):
    """Kind of worker issuing requests."""

    WEB_PROVER = 0
    CLI_PROVER = 1


# This client is always a CLI prover.
CLIENT_NODE_TYPE = NodeType.CLI_PROVER

_Field = descriptor_pb2.FieldDescriptorProto


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    *,
    type_name: str | None = None,
    optional: bool = False,
) -> None:
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=_Field.LABEL_OPTIONAL,
        json_name=_json_name(name),
    )
    if type_name is not None:
        field.type_name = f".{PROTO_PACKAGE}.{type_name}"
    if optional:
        # proto3 `optional` is expressed as a synthetic single-field oneof.
        message.oneof_decl.add(name=f"_{name}")
        field.oneof_index = len(message.oneof_decl) - 1
        field.proto3_optional = True


def _json_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="nexus/orchestrator.proto",
        package=PROTO_PACKAGE,
        syntax="proto3",
    )

    node_type = file_proto.enum_type.add(name="NodeType")
    for member in NodeType:
        node_type.value.add(name=member.name, number=member.value)

    task_request = file_proto.message_type.add(name="GetProofTaskRequest")
    _add_field(task_request, "node_id", 1, _Field.TYPE_STRING)
    _add_field(task_request, "node_type", 2, _Field.TYPE_ENUM, type_name="NodeType")

    task_response = file_proto.message_type.add(name="GetProofTaskResponse")
    _add_field(task_response, "program_id", 1, _Field.TYPE_STRING)
    _add_field(task_response, "public_inputs", 2, _Field.TYPE_BYTES)

    telemetry = file_proto.message_type.add(name="NodeTelemetry")
    _add_field(telemetry, "flops_per_sec", 1, _Field.TYPE_INT64, optional=True)
    _add_field(telemetry, "memory_used", 2, _Field.TYPE_INT64, optional=True)
    _add_field(telemetry, "memory_capacity", 3, _Field.TYPE_INT64, optional=True)
    _add_field(telemetry, "location", 4, _Field.TYPE_STRING, optional=True)

    submit_request = file_proto.message_type.add(name="SubmitProofRequest")
    _add_field(submit_request, "node_id", 1, _Field.TYPE_STRING)
    _add_field(submit_request, "node_type", 2, _Field.TYPE_ENUM, type_name="NodeType")
    _add_field(submit_request, "proof_hash", 3, _Field.TYPE_STRING)
    _add_field(submit_request, "proof", 4, _Field.TYPE_BYTES)
    _add_field(
        submit_request, "node_telemetry", 5, _Field.TYPE_MESSAGE, type_name="NodeTelemetry"
    )

    file_proto.message_type.add(name="SubmitProofResponse")
    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_build_file_descriptor().SerializeToString())


def proto_class(name: str) -> type[Message]:
    """Return the generated protobuf class for a message in the orchestrator schema."""

    descriptor = _POOL.FindMessageTypeByName(f"{PROTO_PACKAGE}.{name}")
    return message_factory.GetMessageClass(descriptor)


WireMessageT = TypeVar("WireMessageT", bound="WireMessage")


class WireMessage(BaseModel):
    """Immutable message with a protobuf wire representation."""

    model_config = ConfigDict(frozen=True)

    proto_name: ClassVar[str]

    def to_proto(self) -> Message:
        return proto_class(self.proto_name)(**self._proto_fields())

    def _proto_fields(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_proto(cls: type[WireMessageT], message: Message) -> WireMessageT:
        return cls()

    def to_bytes(self) -> bytes:
        """Serialize to protobuf wire bytes."""

        return self.to_proto().SerializeToString()

    @classmethod
    def from_bytes(cls: type[WireMessageT], data: bytes) -> WireMessageT:
        """Parse protobuf wire bytes.

        Raises:
            google.protobuf.message.DecodeError: if the bytes are malformed.
            pydantic.ValidationError: if they parse but carry invalid values.
        """

        message = proto_class(cls.proto_name)()
        message.ParseFromString(data)
        return cls.from_proto(message)


class TaskRequest(WireMessage):
    """Request for the next proof task assigned to a node."""

    proto_name: ClassVar[str] = "GetProofTaskRequest"

    node_id: str
    node_type: NodeType = CLIENT_NODE_TYPE

    def _proto_fields(self) -> dict[str, Any]:
        return {"node_id": self.node_id, "node_type": int(self.node_type)}

    @classmethod
    def from_proto(cls, message: Message) -> TaskRequest:
        return cls(node_id=message.node_id, node_type=NodeType(message.node_type))


class ProofTask(WireMessage):
    """A unit of work handed out by the orchestrator."""

    proto_name: ClassVar[str] = "GetProofTaskResponse"

    program_id: str = ""
    public_inputs: bytes = b""

    def _proto_fields(self) -> dict[str, Any]:
        return {"program_id": self.program_id, "public_inputs": self.public_inputs}

    @classmethod
    def from_proto(cls, message: Message) -> ProofTask:
        return cls(program_id=message.program_id, public_inputs=bytes(message.public_inputs))


class NodeTelemetry(WireMessage):
    """Point-in-time view of local compute capacity.

    Every field is optional; a value that couldn't be measured is left unset
    rather than reported as zero.
    """

    proto_name: ClassVar[str] = "NodeTelemetry"

    flops_per_sec: int | None = Field(default=None, ge=0, le=INT64_MAX)
    memory_used: int | None = Field(default=None, ge=0, le=INT64_MAX)
    memory_capacity: int | None = Field(default=None, ge=0, le=INT64_MAX)
    location: str | None = None

    def _proto_fields(self) -> dict[str, Any]:
        fields = {
            "flops_per_sec": self.flops_per_sec,
            "memory_used": self.memory_used,
            "memory_capacity": self.memory_capacity,
            "location": self.location,
        }
        return {key: value for key, value in fields.items() if value is not None}

    @classmethod
    def from_proto(cls, message: Message) -> NodeTelemetry:
        values = {
            name: getattr(message, name)
            for name in ("flops_per_sec", "memory_used", "memory_capacity", "location")
            if message.HasField(name)
        }
        return cls(**values)


class ProofSubmission(WireMessage):
    """A finished proof plus the telemetry snapshot taken when submitting it."""

    proto_name: ClassVar[str] = "SubmitProofRequest"

    node_id: str
    node_type: NodeType = CLIENT_NODE_TYPE
    proof_hash: str
    proof: bytes
    node_telemetry: NodeTelemetry | None = None

    def _proto_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "node_id": self.node_id,
            "node_type": int(self.node_type),
            "proof_hash": self.proof_hash,
            "proof": self.proof,
        }
        if self.node_telemetry is not None:
            fields["node_telemetry"] = self.node_telemetry.to_proto()
        return fields

    @classmethod
    def from_proto(cls, message: Message) -> ProofSubmission:
        telemetry = None
        if message.HasField("node_telemetry"):
            telemetry = NodeTelemetry.from_proto(message.node_telemetry)
        return cls(
            node_id=message.node_id,
            node_type=NodeType(message.node_type),
            proof_hash=message.proof_hash,
            proof=bytes(message.proof),
            node_telemetry=telemetry,
        )


class SubmitProofResponse(WireMessage):
    """Acknowledgement of a submission. Carries no fields."""

    proto_name: ClassVar[str] = "SubmitProofResponse"

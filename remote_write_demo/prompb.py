"""Protobuf message classes for the Prometheus remote-write 0.1.0 schema.

    message WriteRequest { repeated TimeSeries timeseries = 1; }
    message TimeSeries   { repeated Label labels = 1; repeated Sample samples = 2; }
    message Label        { string name = 1; string value = 2; }
    message Sample       { double value = 1; int64 timestamp = 2; }

The file descriptor is built in code and registered in a private pool, so no
protoc step is needed and the names cannot collide with other ``prometheus``
definitions in the default pool.
"""
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "prometheus"

_FieldProto = descriptor_pb2.FieldDescriptorProto


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="remote_write_demo/remote.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    def add_field(message, name, number, field_type, label=_FieldProto.LABEL_OPTIONAL, type_name=None):
        field = message.field.add(name=name, number=number, type=field_type, label=label)
        if type_name:
            field.type_name = f".{PACKAGE}.{type_name}"

    write_request = file_proto.message_type.add(name="WriteRequest")
    add_field(write_request, "timeseries", 1, _FieldProto.TYPE_MESSAGE,
              _FieldProto.LABEL_REPEATED, "TimeSeries")

    timeseries = file_proto.message_type.add(name="TimeSeries")
    add_field(timeseries, "labels", 1, _FieldProto.TYPE_MESSAGE, _FieldProto.LABEL_REPEATED, "Label")
    add_field(timeseries, "samples", 2, _FieldProto.TYPE_MESSAGE, _FieldProto.LABEL_REPEATED, "Sample")

    label = file_proto.message_type.add(name="Label")
    add_field(label, "name", 1, _FieldProto.TYPE_STRING)
    add_field(label, "value", 2, _FieldProto.TYPE_STRING)

    sample = file_proto.message_type.add(name="Sample")
    add_field(sample, "value", 1, _FieldProto.TYPE_DOUBLE)
    add_field(sample, "timestamp", 2, _FieldProto.TYPE_INT64)

    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


WriteRequest = _message_class("WriteRequest")
TimeSeries = _message_class("TimeSeries")
Label = _message_class("Label")
Sample = _message_class("Sample")

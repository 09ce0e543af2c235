"""Binary sticker pack manifest (``signalservice.StickerPack`` protobuf).

The schema mirrors the proto2 definition consumed by the sticker service
and by installing clients::

    message StickerPack {
      message Sticker {
        optional uint32 id    = 1;
        optional string emoji = 2;
      }
      optional string  title    = 1;
      optional string  author   = 2;
      optional Sticker cover    = 3;
      repeated Sticker stickers = 4;
    }
"""

from typing import List, Optional, Sequence

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError as ProtobufDecodeError

from ..common.types import PackInfo, PackManifest, StickerEntry

PROTO_PACKAGE = "signalservice"
_FieldProto = descriptor_pb2.FieldDescriptorProto


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    label: int = _FieldProto.LABEL_OPTIONAL,
    type_name: Optional[str] = None,
) -> None:
    field = message.field.add(name=name, number=number, type=field_type, label=label)
    if type_name:
        field.type_name = type_name


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="stickerpack/sticker_pack.proto",
        package=PROTO_PACKAGE,
        syntax="proto2",
    )
    pack = file_proto.message_type.add(name="StickerPack")
    sticker = pack.nested_type.add(name="Sticker")
    _add_field(sticker, "id", 1, _FieldProto.TYPE_UINT32)
    _add_field(sticker, "emoji", 2, _FieldProto.TYPE_STRING)

    sticker_type = f".{PROTO_PACKAGE}.StickerPack.Sticker"
    _add_field(pack, "title", 1, _FieldProto.TYPE_STRING)
    _add_field(pack, "author", 2, _FieldProto.TYPE_STRING)
    _add_field(pack, "cover", 3, _FieldProto.TYPE_MESSAGE, type_name=sticker_type)
    _add_field(
        pack,
        "stickers",
        4,
        _FieldProto.TYPE_MESSAGE,
        label=_FieldProto.LABEL_REPEATED,
        type_name=sticker_type,
    )
    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_build_file_descriptor().SerializeToString())

StickerPack = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{PROTO_PACKAGE}.StickerPack")
)
Sticker = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{PROTO_PACKAGE}.StickerPack.Sticker")
)


def create_manifest(
    info: PackInfo, stickers: Sequence[StickerEntry], cover: StickerEntry
) -> PackManifest:
    """
    Create a manifest from pack info and already-numbered entries.

    Args:
        info: Title and author.
        stickers: Entries with dense ids in upload order.
        cover: Cover entry, addressed by id.

    Returns:
        PackManifest instance.
    """
    ids = [entry.id for entry in stickers]
    if ids != list(range(len(ids))):
        raise ValueError("Sticker ids must be dense and start at 0.")
    return PackManifest(
        title=info.title,
        author=info.author,
        cover=StickerEntry(id=cover.id, emoji=cover.emoji or ""),
        stickers=list(stickers),
    )


def encode_manifest(manifest: PackManifest) -> bytes:
    """
    Serialize a manifest to its wire form.

    Args:
        manifest: Manifest to serialize.

    Returns:
        Protobuf-encoded bytes.
    """
    proto = StickerPack()
    proto.title = manifest.title
    proto.author = manifest.author
    for entry in manifest.stickers:
        sticker = proto.stickers.add()
        sticker.id = entry.id
        if entry.emoji:
            sticker.emoji = entry.emoji
    proto.cover.id = manifest.cover.id
    proto.cover.emoji = manifest.cover.emoji or ""
    return proto.SerializeToString()


def decode_manifest(data: bytes) -> PackManifest:
    """
    Parse a manifest from its wire form.

    Args:
        data: Protobuf-encoded bytes.

    Returns:
        PackManifest instance.

    Raises:
        ValueError: If the manifest cannot be parsed
    """
    proto = StickerPack()
    try:
        proto.ParseFromString(data)
    except ProtobufDecodeError as exc:
        raise ValueError(f"Failed to parse manifest: {exc}") from exc

    stickers: List[StickerEntry] = [
        StickerEntry(id=item.id, emoji=item.emoji if item.HasField("emoji") else None)
        for item in proto.stickers
    ]
    return PackManifest(
        title=proto.title,
        author=proto.author,
        cover=StickerEntry(id=proto.cover.id, emoji=proto.cover.emoji),
        stickers=stickers,
    )

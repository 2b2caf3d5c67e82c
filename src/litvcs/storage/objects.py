"""Typed object records and their canonical serialization.

Objects form a closed tagged variant: every stored object is a Blob, a Tree or
a Commit. The canonical byte forms defined here are the only input to object
hashing, so two implementations that follow them produce identical hashes for
identical logical objects.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from litvcs.constants import TIMESTAMP_FORMAT


class ObjectType(str, Enum):
    """Type tag stored in every object envelope."""

    BLOB = "Blob"
    TREE = "Tree"
    COMMIT = "Commit"


@dataclass(frozen=True)
class TreeEntry:
    """A single named entry of a tree: a blob or a nested tree."""

    kind: ObjectType
    hash: str

    def to_dict(self) -> Dict[str, str]:
        return {"Type": self.kind.value, "Hash": self.hash}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TreeEntry":
        return cls(kind=ObjectType(data["Type"]), hash=str(data["Hash"]))


@dataclass(frozen=True)
class Commit:
    """A named, timestamped snapshot pointing at a root tree.

    Attributes:
        name: Commit message
        tree: Hash of the root tree
        parents: Ordered parent commit hashes, empty for a root commit
        timestamp: Timezone-aware creation time
    """

    name: str
    tree: str
    parents: Tuple[str, ...] = field(default_factory=tuple)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "Tree": self.tree,
            "Parents": list(self.parents),
            "Timestamp": format_timestamp(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Commit":
        return cls(
            name=str(data["Name"]),
            tree=str(data["Tree"]),
            parents=tuple(str(parent) for parent in data["Parents"]),
            timestamp=parse_timestamp(str(data["Timestamp"])),
        )


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp in the fixed UTC textual form used for hashing."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(text: str) -> datetime:
    """Parse a timestamp produced by ``format_timestamp``."""
    return datetime.strptime(text, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def canonical_json(data: Any) -> bytes:
    """Canonical JSON: sorted keys, no whitespace, UTF-8."""
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def canonical_tree_bytes(entries: Mapping[str, TreeEntry]) -> bytes:
    """Bytes hashed to obtain a tree's identity."""
    payload = {name: entry.to_dict() for name, entry in entries.items()}
    return ObjectType.TREE.value.encode("utf-8") + b"\n" + canonical_json(payload)


def canonical_commit_bytes(commit: Commit) -> bytes:
    """Bytes hashed to obtain a commit's identity."""
    return ObjectType.COMMIT.value.encode("utf-8") + b"\n" + canonical_json(commit.to_dict())


def entries_to_dict(entries: Mapping[str, TreeEntry]) -> Dict[str, Dict[str, str]]:
    return {name: entry.to_dict() for name, entry in sorted(entries.items())}


def entries_from_dict(data: Mapping[str, Any]) -> Dict[str, TreeEntry]:
    return {str(name): TreeEntry.from_dict(entry) for name, entry in data.items()}

"""
parcnet_pod/core/entries.py

PodEntries: an immutable name → PodValue mapping.

Names must match ^[A-Za-z_]\\w*$ over ASCII. Insertion order carries no
meaning: content ID and canonical JSON both sort by name.
"""

import json
import re
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from parcnet_pod.core.canonical import canonical_json, entries_from_json, entries_to_json
from parcnet_pod.core.exceptions import EntryNameError, ValueFormatError
from parcnet_pod.core.hashing import compute_content_id, sorted_names
from parcnet_pod.core.values import PodValue

_NAME_RE = re.compile(r"[A-Za-z_]\w*", re.ASCII)


def check_name(name: Any) -> str:
    if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
        raise EntryNameError("Invalid entry name", {"name": repr(name)})
    return name


class PodEntries(Mapping[str, PodValue]):
    """
    Validated POD entries.

    Values may be given as PodValue or as plain Python values, which are
    mapped with PodValue.from_native(). Construction validates every name
    and value; the mapping cannot be changed afterwards.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        merged: Dict[str, Any] = dict(entries or {})
        merged.update(kwargs)
        self._entries: Dict[str, PodValue] = {
            check_name(name): PodValue.from_native(value)
            for name, value in merged.items()
        }

    @classmethod
    def coerce(cls, entries: Union["PodEntries", Mapping[str, Any]]) -> "PodEntries":
        if isinstance(entries, PodEntries):
            return entries
        return cls(entries)

    # ── Mapping ───────────────────────────────────────────────

    def __getitem__(self, name: str) -> PodValue:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PodEntries):
            return self._entries == other._entries
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def __repr__(self) -> str:
        return f"PodEntries({self._entries!r})"

    # ── Validation / hashing ──────────────────────────────────

    def check(self) -> "PodEntries":
        """Re-validate every name and value. Returns self."""
        for name, value in self._entries.items():
            check_name(name)
            value.check()
        return self

    def content_id(self) -> int:
        """Content ID; raises EmptyEntriesError when there are no entries."""
        return compute_content_id(self._entries)

    def sorted_names(self):
        return sorted_names(self._entries)

    # ── JSON ──────────────────────────────────────────────────

    def to_json_dict(self) -> Dict[str, Any]:
        return entries_to_json(self._entries)

    def to_json(self) -> str:
        """Canonical JSON text: sorted keys, no whitespace."""
        return canonical_json(self.to_json_dict())

    @classmethod
    def from_json_dict(cls, data: Any) -> "PodEntries":
        return cls(entries_from_json(data))

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "PodEntries":
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise ValueFormatError(f"Entries are not valid JSON: {exc}") from exc
        return cls.from_json_dict(data)

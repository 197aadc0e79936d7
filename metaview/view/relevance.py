"""Decide which list items are about a subject, and which of their links are new."""

from __future__ import annotations

from dataclasses import dataclass

from ..models import ListItem, StructuredLink
from .identity import normalize
from .metadata import MetadataMap


@dataclass(frozen=True)
class Subject:
    """What list items are filtered against: a note identity or a #tag."""

    label: str  # as given, used in notices
    identity: str  # normalized note identity, or lowercased tag
    mention: str = ""  # normalized note name looked for in item text; defaults to identity

    @property
    def is_tag(self) -> bool:
        return self.identity.startswith("#")

    @classmethod
    def of(cls, label: str, identity: str | None = None, mention: str | None = None) -> "Subject":
        label = label.strip()
        if label.startswith("#"):
            return cls(label=label, identity=label.lower())
        identity = identity if identity is not None else normalize(label)
        return cls(label=label, identity=identity, mention=mention if mention is not None else identity)


def is_visible(item: ListItem, subject: Subject) -> bool:
    """True when the item carries the subject tag, links the subject note, or names it."""
    if subject.is_tag:
        return any(tag.lower() == subject.identity for tag in item.tags or ())

    if not subject.identity:
        return False
    if any(normalize(link) == subject.identity for link in item.outlinks or ()):
        return True
    # Also matches the subject named in plain prose, by note name.
    mention = subject.mention or subject.identity
    return mention in normalize(item.text)


def filtered_links(item: ListItem, metadata: MetadataMap, subject: Subject) -> list[StructuredLink]:
    """Outlinks that are neither the subject itself nor already a metadata value."""
    if not item.outlinks:
        return []

    excluded = {subject.identity}
    for values in metadata.values():
        excluded.update(normalize(v) for v in values)

    return [link for link in item.outlinks if normalize(link) not in excluded]

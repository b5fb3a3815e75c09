# -*- coding: utf-8 -*-
"""Static subject catalog used to resolve #tags in quick-add text."""
from __future__ import annotations

import typing as t

from .models import Subject


DEFAULT_SUBJECTS: tuple[Subject, ...] = (
    Subject(id="math", name="Mathematics", color="#0056C7", icon="📐"),
    Subject(id="physics", name="Physics", color="#7209B7", icon="⚛️"),
    Subject(id="chemistry", name="Chemistry", color="#4CC9F0", icon="🧪"),
    Subject(id="biology", name="Biology", color="#38B000", icon="🧬"),
    Subject(id="history", name="History", color="#BC6C25", icon="📜"),
    Subject(id="english", name="English", color="#FF5400", icon="📝"),
    Subject(id="literature", name="Literature", color="#9D4EDD", icon="📚"),
    Subject(id="geography", name="Geography", color="#2D6A4F", icon="🌍"),
    Subject(id="computer", name="Computer Science", color="#2B2D42", icon="💻"),
    Subject(id="art", name="Art", color="#E63946", icon="🎨"),
)


class SubjectCatalog:
    """Read-only lookup of subjects by id or display name."""

    def __init__(self, subjects: t.Iterable[Subject]) -> None:
        self._by_id: dict[str, Subject] = {}
        for subject in subjects:
            if subject.id in self._by_id:
                raise ValueError(f"Duplicate subject id: {subject.id!r}")
            self._by_id[subject.id] = subject

    def __iter__(self) -> t.Iterator[Subject]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, subject_id: object) -> bool:
        return subject_id in self._by_id

    def get(self, subject_id: str) -> t.Optional[Subject]:
        return self._by_id.get(subject_id)

    def resolve(self, tag: str) -> t.Optional[Subject]:
        """Find the subject a tag refers to.

        Matching is case-insensitive against both the id and the display name.

        :param tag: Tag text without the leading '#'.
        :return: The matching Subject, or None if the tag is not a known subject.
        """
        needle = tag.lower()
        for subject in self._by_id.values():
            if subject.id.lower() == needle or subject.name.lower() == needle:
                return subject
        return None


DEFAULT_CATALOG = SubjectCatalog(DEFAULT_SUBJECTS)

"""Spelling variants of author names and tags across a library."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from reftidy.domain.model import CreatorType
from reftidy.domain.similarity import AUTHOR_VARIANT_THRESHOLD, TAG_VARIANT_THRESHOLD, similarity

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from reftidy.domain.model import BibliographicRecord


@dataclass(frozen=True, slots=True)
class VariantGroup:
    """Names that likely spell the same thing, and the records using them."""

    names: tuple[str, ...]
    record_keys: tuple[str, ...]


def find_author_variants(records: Iterable[BibliographicRecord]) -> list[VariantGroup]:
    keys_by_name: dict[str, list[str]] = defaultdict(list)
    for record in records:
        for creator in record.valid_creators:
            if creator.creator_type != CreatorType.AUTHOR or not creator.surname:
                continue
            if record.key not in keys_by_name[creator.surname]:
                keys_by_name[creator.surname].append(record.key)
    return _variant_groups(keys_by_name, threshold=AUTHOR_VARIANT_THRESHOLD, prepare=str)


def find_tag_variants(records: Iterable[BibliographicRecord]) -> list[VariantGroup]:
    keys_by_tag: dict[str, list[str]] = defaultdict(list)
    for record in records:
        for tag in sorted(record.tags):
            keys_by_tag[tag].append(record.key)
    return _variant_groups(keys_by_tag, threshold=TAG_VARIANT_THRESHOLD, prepare=_tag_text)


def _tag_text(tag: str) -> str:
    return tag.casefold().replace("-", " ").replace("_", " ")


def _variant_groups(
    keys_by_name: dict[str, list[str]],
    *,
    threshold: float,
    prepare: Callable[[str], str],
) -> list[VariantGroup]:
    """Greedy grouping: each name joins the first earlier name it resembles.

    Names are distinct keys, so a score of 1 means they differ only in case or
    separators and still count as variants.
    """

    names = sorted(keys_by_name)
    claimed: set[str] = set()
    groups: list[VariantGroup] = []
    for name in names:
        if name in claimed:
            continue
        similar = [name]
        for other in names:
            if other == name or other in claimed:
                continue
            score = similarity(prepare(name), prepare(other))
            if score > threshold:
                similar.append(other)
                claimed.add(other)
        claimed.add(name)
        if len(similar) > 1:
            record_keys: list[str] = []
            for variant in similar:
                record_keys.extend(key for key in keys_by_name[variant] if key not in record_keys)
            groups.append(VariantGroup(names=tuple(similar), record_keys=tuple(record_keys)))
    return groups

"""Translate Zotero item payloads into domain records."""

from __future__ import annotations

from reftidy.domain.model import BibliographicRecord, Creator

from .schema import ZoteroCreator, ZoteroItem

# Bookkeeping keys that travel in ``data`` but are not bibliographic fields.
_NON_FIELD_KEYS = frozenset({"dateModified", "parentItem", "deleted"})


def parse_item(payload: object) -> BibliographicRecord:
    """Validate a raw item payload and translate it."""

    return translate_item(ZoteroItem.model_validate(payload))


def translate_item(item: ZoteroItem) -> BibliographicRecord:
    data = item.data
    fields = {
        name: value
        for name, value in data.field_values().items()
        if name not in _NON_FIELD_KEYS
    }
    return BibliographicRecord(
        key=item.key,
        version=item.version,
        record_type=data.item_type,
        fields=fields,
        creators=tuple(_translate_creator(creator) for creator in data.creators),
        tags=frozenset(tag.tag for tag in data.tags if tag.tag.strip()),
        date_added=data.date_added,
    )


def _translate_creator(creator: ZoteroCreator) -> Creator:
    return Creator(
        creator_type=creator.creator_type.strip(),
        first_name=creator.first_name.strip(),
        last_name=creator.last_name.strip(),
        name=creator.name.strip(),
    )

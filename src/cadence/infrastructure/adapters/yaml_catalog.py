"""
YAML Catalog: infrastructure adapter for the set of known study items.

Cards are kept in a YAML document:

    cards:
      - id: card_01HV...
        question: "Who ...?"
        answer: "..."
        topic: "chapter-1"

A bare top-level list of cards is accepted on read as well.
"""

import logging
from collections.abc import Iterable
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any

import yaml
from ulid import ULID

from cadence.domain.constants import ITEM_ID_PREFIX
from cadence.domain.errors import CatalogError
from cadence.domain.models import CatalogItem
from cadence.domain.ports import Catalog

logger = logging.getLogger(__name__)


def generate_item_id() -> str:
    """Generate a stable item ID using ULID."""
    return f"{ITEM_ID_PREFIX}{ULID()}"


def parse_items(data: Any, source: str = "<data>") -> list[CatalogItem]:
    """
    Turn loaded YAML into CatalogItems.

    Entries without an ``id`` get an empty one; ids are assigned when the
    items are added to a catalog.

    Raises:
        CatalogError: If the structure is not a list of cards with questions.
    """
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("cards", [])
    if not isinstance(data, list):
        raise CatalogError(f"{source}: expected a list of cards")

    items: list[CatalogItem] = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise CatalogError(f"{source}: card #{idx + 1} is not a mapping")
        question = str(entry.get("question") or "").strip()
        if not question:
            raise CatalogError(f"{source}: card #{idx + 1} has no question")
        topic = entry.get("topic")
        items.append(
            CatalogItem(
                id=str(entry.get("id") or ""),
                question=question,
                answer=str(entry.get("answer") or ""),
                topic=str(topic) if topic is not None else None,
            )
        )
    return items


def load_items_file(path: Path) -> list[CatalogItem]:
    try:
        text = Path(path).read_text(encoding="utf-8")
        data = yaml.safe_load(text)
    except OSError as e:
        raise CatalogError(f"Could not read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise CatalogError(f"Invalid YAML in {path}: {e}") from e
    return parse_items(data, source=str(path))


class InMemoryCatalog(Catalog):
    """
    Catalog held in memory.

    New items are skipped when their question text (or id) is already present.
    """

    def __init__(self, items: Iterable[CatalogItem] = ()):
        self._items: list[CatalogItem] = []
        self._merge(items)

    def known_item_ids(self) -> list[str]:
        return [item.id for item in self._items]

    def items(self) -> list[CatalogItem]:
        return list(self._items)

    def get(self, item_id: str) -> CatalogItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def add_items(self, items: Iterable[CatalogItem]) -> list[CatalogItem]:
        """Append new items and return the ones actually added."""
        return self._merge(items)

    def _merge(self, items: Iterable[CatalogItem]) -> list[CatalogItem]:
        questions = {item.question for item in self._items}
        ids = {item.id for item in self._items}
        added: list[CatalogItem] = []

        for item in items:
            if item.question in questions:
                logger.debug(f"Skipping duplicate question: {item.question[:60]}")
                continue
            if item.id in ids:
                logger.debug(f"Skipping duplicate id: {item.id}")
                continue
            if not item.id:
                item = CatalogItem(
                    id=generate_item_id(),
                    question=item.question,
                    answer=item.answer,
                    topic=item.topic,
                )
            questions.add(item.question)
            ids.add(item.id)
            self._items.append(item)
            added.append(item)

        return added


class YamlCatalog(InMemoryCatalog):
    """
    Catalog persisted to a YAML file, re-read on every access.

    Entries the file repeats are ignored in memory but left in the file;
    writes only add cards or fill in missing ids.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._entries: list[CatalogItem] = []
        super().__init__()

    def known_item_ids(self) -> list[str]:
        self._reload()
        return super().known_item_ids()

    def items(self) -> list[CatalogItem]:
        self._reload()
        return super().items()

    def get(self, item_id: str) -> CatalogItem | None:
        self._reload()
        return super().get(item_id)

    def add_items(self, items: Iterable[CatalogItem]) -> list[CatalogItem]:
        self._reload()
        added = self._merge(items)
        if added:
            self._entries.extend(added)
            self._write(self._entries)
            logger.info(f"Added {len(added)} card(s) to {self.path}")
        return added

    def _reload(self) -> None:
        self._items = []
        self._entries = []
        if not self.path.exists():
            return

        entries = load_items_file(self.path)
        if any(not item.id for item in entries):
            # Persist freshly assigned ids so they stay stable across reads
            entries = [
                item if item.id else replace(item, id=generate_item_id()) for item in entries
            ]
            self._write(entries)
            logger.info(f"Assigned IDs in {self.path}")
        self._entries = entries

        skipped = len(entries) - len(self._merge(entries))
        if skipped:
            logger.warning(f"Ignoring {skipped} repeated card(s) in {self.path}")

    def _write(self, items: list[CatalogItem]) -> None:
        doc = {
            "cards": [
                {k: v for k, v in asdict(item).items() if v is not None and v != ""}
                for item in items
            ]
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(doc, allow_unicode=True, sort_keys=False), encoding="utf-8"
            )
        except OSError as e:
            raise CatalogError(f"Could not write {self.path}: {e}") from e

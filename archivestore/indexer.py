from __future__ import annotations

from pathlib import Path
from typing import Dict, List
import json
import re
from datetime import datetime

from .records import ArtifactType, Record
from .store import CatalogStore
from .utils import determine_media_type, ensure_dir, get_logger


def _build_search_index(items: List[Record]) -> Dict:
  """Build lightweight search index (headlines, texts and tags)."""
  search_index = {
    "headline_terms": {},
    "text_terms": {},
    "tag_terms": {},
    "item_map": []
  }

  for idx, item in enumerate(items):
    search_index["item_map"].append(f"{item.type.value.lower()}_{item.visual_name}")

    if item.headline:
      _add_to_search_index(search_index["headline_terms"], item.headline.lower(), idx)
    if item.text:
      _add_to_search_index(search_index["text_terms"], item.text.lower(), idx)
    for tag in item.tags:
      _add_to_search_index(search_index["tag_terms"], tag.lower(), idx)

  return search_index


def _add_to_search_index(index_dict: Dict, text: str, item_idx: int):
    """Add text to search index, splitting into words and handling duplicates."""
    # Split text into words, keeping only alphanumeric characters
    words = re.findall(r'\b\w+\b', text)

    for word in words:
        if len(word) >= 3:  # Only index words with 3+ characters
            if word not in index_dict:
                index_dict[word] = []
            if item_idx not in index_dict[word]:
                index_dict[word].append(item_idx)


def _export_item(item: Record) -> Dict:
    exported = item.to_dict()
    exported["mediaType"] = determine_media_type(item.file_path)
    return exported


def build_catalog_index(store: CatalogStore) -> Dict:
  """Build the static catalog payload from the store's current items."""
  log = get_logger()
  items = store.sorted_items
  log.debug(f"Building catalog index for {len(items)} items")

  unresolved = [item.visual_name for item in items if not item.file_path]
  if unresolved:
    log.info(f"{len(unresolved)} items have no media file")

  return {
    "generated_at": datetime.now().isoformat(timespec="seconds"),
    "counts": {
      "total": store.items_count,
      ArtifactType.DOVE.value: store.dove_count,
      ArtifactType.HAWK.value: store.hawk_count,
    },
    "years": store.years,
    "tags": store.all_tags,
    "tag_counts": store.tag_counts,
    "unresolved": unresolved,
    "items": [_export_item(item) for item in items],
    "search_index": _build_search_index(items),
  }


def write_index_files(store: CatalogStore, json_path: Path) -> Path:
  """Write catalog.json for a static presentation layer."""
  json_path = Path(json_path)
  log = get_logger()

  idx = build_catalog_index(store)

  ensure_dir(json_path.parent)
  with open(json_path, "w", encoding="utf-8") as f:
    json.dump(idx, f, ensure_ascii=False, indent=2)
  log.debug(f"Wrote catalog index: {json_path}")

  return json_path

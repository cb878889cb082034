#!/usr/bin/env python3
"""
Build the global documents the site reads besides the per-source fragments.

Outputs:
- data/channels.json: every channel of data/channels/<CODE>/<source>.json,
  flattened into {"channels": [...]} (used to resolve favorites)
- data/cat_channels/categories.json: sorted, deduplicated category names
  (existing list merged with the category folders present on disk)

Usage:
    python scripts/build_catalog.py [data_dir]
"""

import json
import logging
import sys
from pathlib import Path

logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
logger = logging.getLogger(__name__)

DATA_DIR = Path("data")


def read_fragment_channels(path: Path) -> list[dict]:
    """Raw channel objects of one fragment file ([] if unreadable)."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Skipping {path}: {e}")
        return []
    channels = data.get("channels") if isinstance(data, dict) else None
    if not isinstance(channels, list):
        logger.warning(f"Skipping {path}: no channel list")
        return []
    return [ch for ch in channels if isinstance(ch, dict)]


def build_channels_catalog(data_dir: Path) -> int:
    channels_dir = data_dir / "channels"
    out_path = data_dir / "channels.json"

    all_channels = []
    fragments = sorted(channels_dir.glob("*/*.json")) if channels_dir.is_dir() else []
    for fragment in fragments:
        all_channels.extend(read_fragment_channels(fragment))

    out_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = out_path.with_suffix(".json.tmp")
    tmp_path.write_text(json.dumps({"channels": all_channels}, ensure_ascii=False), encoding="utf-8")
    tmp_path.replace(out_path)

    logger.info(f"Wrote {out_path} ({len(all_channels)} channels from {len(fragments)} fragments)")
    return len(all_channels)


def build_categories(data_dir: Path) -> list[str]:
    cat_dir = data_dir / "cat_channels"
    out_path = cat_dir / "categories.json"

    names = set()
    if out_path.is_file():
        try:
            existing = json.loads(out_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable {out_path}: {e}")
            existing = []
        if isinstance(existing, list):
            names.update(n for n in existing if isinstance(n, str) and n.strip())

    if cat_dir.is_dir():
        names.update(p.name for p in cat_dir.iterdir() if p.is_dir() and any(p.glob("*.json")))

    categories = sorted(names)
    cat_dir.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(categories, ensure_ascii=False), encoding="utf-8")

    logger.info(f"Wrote {out_path} ({len(categories)} categories)")
    return categories


def main():
    data_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else DATA_DIR
    if not data_dir.is_dir():
        logger.error(f"{data_dir} not found")
        sys.exit(1)

    build_channels_catalog(data_dir)
    build_categories(data_dir)
    logger.info("✅ Catalog build complete")


if __name__ == "__main__":
    main()

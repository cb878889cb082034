"""
Persistence for client state (favorites forest, trash list).

Each record is one named JSON document read and written whole. Backends:
in-memory, one file per record, or a SQLAlchemy table of documents.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol

from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from .errors import StateError

logger = logging.getLogger(__name__)

MEMORY_URL = "memory"


class DocumentStore(Protocol):
    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, text: str) -> None:
        ...


class MemoryDocumentStore:
    """Documents kept for the lifetime of the process only."""

    def __init__(self, documents: Optional[dict[str, str]] = None):
        self.documents: dict[str, str] = dict(documents or {})

    def read(self, key: str) -> Optional[str]:
        return self.documents.get(key)

    def write(self, key: str, text: str) -> None:
        self.documents[key] = text


class JsonFileDocumentStore:
    """One <key>.json file per document inside a directory."""

    KEY_RE = re.compile(r"[^A-Za-z0-9._-]")

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{self.KEY_RE.sub('_', key)}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def write(self, key: str, text: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StateError(f"Could not write {path}: {e}") from e


class Base(DeclarativeBase):
    pass


class StoredDocument(Base):
    __tablename__ = "documents"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class SqlDocumentStore:
    """Documents stored as rows of a `documents` table."""

    def __init__(self, engine: Engine | str):
        self.engine = create_engine(engine) if isinstance(engine, str) else engine
        Base.metadata.create_all(self.engine)

    def read(self, key: str) -> Optional[str]:
        try:
            with Session(self.engine) as session:
                doc = session.get(StoredDocument, key)
                return doc.body if doc else None
        except SQLAlchemyError as e:
            logger.warning(f"Could not read document {key!r}: {e}")
            return None

    def write(self, key: str, text: str) -> None:
        try:
            with Session(self.engine) as session:
                session.merge(
                    StoredDocument(
                        key=key,
                        body=text,
                        updated_at=datetime.now(timezone.utc).replace(tzinfo=None),
                    )
                )
                session.commit()
        except SQLAlchemyError as e:
            raise StateError(f"Could not write document {key!r}: {e}") from e


def open_state_store(url: str) -> DocumentStore:
    """'memory' for an in-process store, otherwise a SQLAlchemy database URL."""
    if url == MEMORY_URL:
        return MemoryDocumentStore()
    return SqlDocumentStore(url)


def load_json(store: DocumentStore, key: str) -> Optional[Any]:
    """Decoded document, or None when it is missing or corrupt."""
    text = store.read(key)
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError as e:
        logger.warning(f"Ignoring corrupt document {key!r}: {e}")
        return None


def save_json(store: DocumentStore, key: str, value: Any) -> bool:
    """Write a document; failures are logged and reported as False."""
    try:
        store.write(key, json.dumps(value, ensure_ascii=False))
        return True
    except StateError as e:
        logger.warning(str(e))
        return False

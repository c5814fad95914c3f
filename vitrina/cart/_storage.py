"""
Cart storage — durable key → blob backends.

Backends implement the `CartStorage` protocol and never raise: failures come
back as Error(StorageError). Last write wins; there is no cross-process lock.

    storage = FileCartStorage(Path("~/.vitrina/cart.json").expanduser())
    await storage.save("vitrina:cart", blob)
    match await storage.load("vitrina:cart"):
        case Ok(None): ...        # nothing stored yet
        case Ok(blob): ...
        case Error(StorageError(message)): ...
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from kungfu import Result, Ok, Error
from sqlalchemy import DateTime, String, Text, select, delete
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from vitrina.cart._types import StorageError


# ═══════════════════════════════════════════════════════════════════════════════
# Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CartStorage(Protocol):
    async def load(self, key: str) -> Result[str | None, StorageError]: ...

    async def save(self, key: str, blob: str) -> Result[None, StorageError]: ...

    async def delete(self, key: str) -> Result[bool, StorageError]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Storage — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCartStorage:
    """
    In-memory storage.

    Note: Only for tests and single-process demos; nothing survives restart.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._blobs: dict[str, str] = dict(initial or {})
        self.writes = 0

    async def load(self, key: str) -> Result[str | None, StorageError]:
        return Ok(self._blobs.get(key))

    async def save(self, key: str, blob: str) -> Result[None, StorageError]:
        self._blobs[key] = blob
        self.writes += 1
        return Ok(None)

    async def delete(self, key: str) -> Result[bool, StorageError]:
        return Ok(self._blobs.pop(key, None) is not None)


# ═══════════════════════════════════════════════════════════════════════════════
# File Storage — client-side durable store
# ═══════════════════════════════════════════════════════════════════════════════


class FileCartStorage:
    """
    JSON document on disk mapping key → blob.

    Writes go to a temp file and are renamed into place, so a crash mid-write
    leaves the previous document. Blocking I/O runs in a worker thread.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self, key: str) -> Result[str | None, StorageError]:
        try:
            document = await asyncio.to_thread(self._read)
        except (OSError, ValueError) as e:
            return Error(StorageError(f"Failed to read {self._path}: {e}", e))

        value = document.get(key)
        if value is None or isinstance(value, str):
            return Ok(value)
        return Error(StorageError(f"Entry {key!r} in {self._path} is not a string"))

    async def save(self, key: str, blob: str) -> Result[None, StorageError]:
        try:
            await asyncio.to_thread(self._write_entry, key, blob)
        except OSError as e:
            return Error(StorageError(f"Failed to write {self._path}: {e}", e))
        return Ok(None)

    async def delete(self, key: str) -> Result[bool, StorageError]:
        try:
            existed = await asyncio.to_thread(self._write_entry, key, None)
        except OSError as e:
            return Error(StorageError(f"Failed to write {self._path}: {e}", e))
        return Ok(existed)

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        document = json.loads(raw)
        if not isinstance(document, dict):
            raise ValueError("storage document is not a JSON object")
        return document

    def _write_entry(self, key: str, blob: str | None) -> bool:
        try:
            document = self._read()
        except ValueError:
            # Unreadable document: start over rather than refuse every write
            document = {}

        existed = key in document
        if blob is None:
            document.pop(key, None)
        else:
            document[key] = blob

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False)
            os.replace(tmp, self._path)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise
        return existed


# ═══════════════════════════════════════════════════════════════════════════════
# SQLAlchemy Storage
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class CartBlobTable(Base):
    __tablename__ = "cart_blobs"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    blob: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class SQLAlchemyCartStorage:
    """
    Cart blobs in a `cart_blobs` table.

    Upserts with SQLite's ON CONFLICT (aiosqlite is the default driver);
    `updated_at` records the last writer's time, and the last writer wins.

    Example:
        session_factory, engine = await create_database("sqlite+aiosqlite:///cart.db")
        storage = SQLAlchemyCartStorage(session_factory)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load(self, key: str) -> Result[str | None, StorageError]:
        try:
            async with self._session_factory() as session:
                stmt = select(CartBlobTable.blob).where(CartBlobTable.key == key)
                result = await session.execute(stmt)
                return Ok(result.scalar_one_or_none())
        except Exception as e:
            return Error(StorageError(f"Failed to load: {e}", e))

    async def save(self, key: str, blob: str) -> Result[None, StorageError]:
        try:
            async with self._session_factory() as session:
                now = datetime.now(timezone.utc).replace(tzinfo=None)
                stmt = (
                    sqlite_insert(CartBlobTable)
                    .values(key=key, blob=blob, updated_at=now)
                    .on_conflict_do_update(
                        index_elements=[CartBlobTable.key],
                        set_={"blob": blob, "updated_at": now},
                    )
                )
                await session.execute(stmt)
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StorageError(f"Failed to save: {e}", e))

    async def delete(self, key: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(CartBlobTable).where(CartBlobTable.key == key)
                )
                await session.commit()
                return Ok(bool(getattr(result, "rowcount", 0)))
        except Exception as e:
            return Error(StorageError(f"Failed to delete: {e}", e))


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create tables and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = (
    "CartStorage",
    "MemoryCartStorage",
    "FileCartStorage",
    "SQLAlchemyCartStorage",
    "CartBlobTable",
    "create_database",
)

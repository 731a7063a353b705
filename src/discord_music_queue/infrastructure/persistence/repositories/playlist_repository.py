"""SQLite implementation of the playlist repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from discord_music_queue.domain.playlists.entities import Playlist, PlaylistEntry
from discord_music_queue.domain.playlists.repository import PlaylistRepository
from discord_music_queue.domain.shared.datetime_utils import UtcDateTime
from discord_music_queue.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLitePlaylistRepository(PlaylistRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def create(self, playlist: Playlist) -> None:
        async with self._db.transaction() as conn:
            await conn.execute(
                "INSERT INTO playlists (id, name, owner_id, created_at) VALUES (?, ?, ?, ?)",
                (
                    playlist.id,
                    playlist.name,
                    playlist.owner_id,
                    UtcDateTime(playlist.created_at).iso,
                ),
            )
            for position, entry in enumerate(playlist.entries):
                await self._insert_entry(conn, playlist.id, position, entry)
        logger.debug(LogTemplates.PLAYLIST_CREATED, playlist.id, playlist.name, playlist.owner_id)

    async def get(self, playlist_id: str) -> Playlist | None:
        row = await self._db.fetch_one("SELECT * FROM playlists WHERE id = ?", (playlist_id,))
        if row is None:
            return None
        return await self._load(row)

    async def list_for_owner(self, owner_id: int) -> list[Playlist]:
        rows = await self._db.fetch_all(
            "SELECT * FROM playlists WHERE owner_id = ? ORDER BY created_at ASC, id ASC",
            (owner_id,),
        )
        return [await self._load(row) for row in rows]

    async def find_by_name(self, owner_id: int, name: str) -> Playlist | None:
        row = await self._db.fetch_one(
            "SELECT * FROM playlists WHERE owner_id = ? AND lower(name) = lower(?)",
            (owner_id, name.strip()),
        )
        if row is None:
            return None
        return await self._load(row)

    async def add_entry(self, playlist_id: str, entry: PlaylistEntry) -> int:
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM playlist_tracks WHERE playlist_id = ?", (playlist_id,)
            )
            (position,) = await cursor.fetchone()
            await self._insert_entry(conn, playlist_id, position, entry)
        logger.debug(LogTemplates.PLAYLIST_TRACK_ADDED, entry.title, playlist_id)
        return position

    async def remove_entry(self, playlist_id: str, position: int) -> PlaylistEntry | None:
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                "SELECT * FROM playlist_tracks WHERE playlist_id = ? AND position = ?",
                (playlist_id, position),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            await conn.execute("DELETE FROM playlist_tracks WHERE id = ?", (row["id"],))
            await conn.execute(
                """
                UPDATE playlist_tracks SET position = position - 1
                WHERE playlist_id = ? AND position > ?
                """,
                (playlist_id, position),
            )
        logger.debug(LogTemplates.PLAYLIST_TRACK_REMOVED, position, playlist_id)
        return self._row_to_entry(dict(row))

    async def delete(self, playlist_id: str) -> bool:
        deleted = await self._db.execute("DELETE FROM playlists WHERE id = ?", (playlist_id,))
        if deleted:
            logger.debug(LogTemplates.PLAYLIST_DELETED, playlist_id)
        return deleted > 0

    async def _load(self, row: dict[str, Any]) -> Playlist:
        entry_rows = await self._db.fetch_all(
            "SELECT * FROM playlist_tracks WHERE playlist_id = ? ORDER BY position ASC",
            (row["id"],),
        )
        return Playlist(
            id=row["id"],
            name=row["name"],
            owner_id=row["owner_id"],
            created_at=UtcDateTime.from_iso(row["created_at"]).dt,
            entries=[self._row_to_entry(r) for r in entry_rows],
        )

    @staticmethod
    async def _insert_entry(conn: Any, playlist_id: str, position: int, entry: PlaylistEntry) -> None:
        await conn.execute(
            """
            INSERT INTO playlist_tracks (
                playlist_id, position, title, artist, duration_seconds, source_url, added_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                playlist_id,
                position,
                entry.title,
                entry.artist,
                entry.duration_seconds,
                entry.source_url,
                UtcDateTime(entry.added_at).iso,
            ),
        )

    @staticmethod
    def _row_to_entry(row: dict[str, Any]) -> PlaylistEntry:
        return PlaylistEntry(
            title=row["title"],
            artist=row["artist"],
            duration_seconds=row["duration_seconds"],
            source_url=row["source_url"],
            added_at=UtcDateTime.from_iso(row["added_at"]).dt,
        )

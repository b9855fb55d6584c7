"""SQLite persistence for handshake telemetry and the handshake audit log.

Credential tokens are never written here: the audit log records how each
handshake ended, not what it produced.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from social_handshake.handshake.controller import HandshakeController
from social_handshake.models.telemetry import TelemetryRecord
from social_handshake.telemetry.sink import RecordingTelemetrySink

logger = logging.getLogger(__name__)

_SCHEMA = """
-- Telemetry events (append-only)
CREATE TABLE IF NOT EXISTS telemetry_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    correlation_token TEXT,
    params JSON NOT NULL,
    recorded_at TIMESTAMP NOT NULL
);

-- One row per finished handshake
CREATE TABLE IF NOT EXISTS handshakes (
    correlation_token TEXT PRIMARY KEY,
    provider TEXT NOT NULL,
    requested_scope JSON NOT NULL,
    outcome TEXT NOT NULL,
    exit_path TEXT,
    completed_at TIMESTAMP NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_telemetry_token ON telemetry_events(correlation_token);
CREATE INDEX IF NOT EXISTS idx_telemetry_name ON telemetry_events(name);
"""


class StorageEngine:
    """Async SQLite storage for handshake telemetry."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open connection and create schema."""
        self._db = await aiosqlite.connect(str(self.db_path))
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(_SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("StorageEngine not initialized — call initialize() first")
        return self._db

    # ----- Telemetry -----

    async def append_telemetry(self, records: list[TelemetryRecord]) -> None:
        await self.db.executemany(
            """INSERT INTO telemetry_events (name, correlation_token, params, recorded_at)
               VALUES (?, ?, ?, ?)""",
            [
                (
                    r.name.value,
                    r.correlation_token,
                    json.dumps(r.params),
                    r.recorded_at.isoformat(),
                )
                for r in records
            ],
        )
        await self.db.commit()

    async def list_telemetry(
        self,
        *,
        name: str | None = None,
        correlation_token: str | None = None,
    ) -> list[dict]:
        query = "SELECT * FROM telemetry_events WHERE 1=1"
        params: list = []
        if name:
            query += " AND name = ?"
            params.append(name)
        if correlation_token:
            query += " AND correlation_token = ?"
            params.append(correlation_token)
        query += " ORDER BY id"
        cursor = await self.db.execute(query, params)
        rows = await cursor.fetchall()
        result = []
        for row in rows:
            d = dict(row)
            d["params"] = json.loads(d["params"])
            result.append(d)
        return result

    # ----- Handshake audit log -----

    async def record_handshake(
        self,
        *,
        correlation_token: str,
        provider: str,
        requested_scope: list[str],
        outcome: str,
        exit_path: str | None,
        completed_at: datetime | None = None,
    ) -> None:
        completed = completed_at or datetime.now(UTC)
        await self.db.execute(
            """INSERT INTO handshakes
                 (correlation_token, provider, requested_scope, outcome, exit_path, completed_at)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(correlation_token) DO UPDATE SET
                 outcome=excluded.outcome,
                 exit_path=excluded.exit_path,
                 completed_at=excluded.completed_at""",
            (
                correlation_token,
                provider,
                json.dumps(sorted(requested_scope)),
                outcome,
                exit_path,
                completed.isoformat(),
            ),
        )
        await self.db.commit()

    async def get_handshake(self, correlation_token: str) -> dict | None:
        cursor = await self.db.execute(
            "SELECT * FROM handshakes WHERE correlation_token = ?", (correlation_token,)
        )
        row = await cursor.fetchone()
        if not row:
            return None
        d = dict(row)
        d["requested_scope"] = json.loads(d["requested_scope"])
        return d

    async def list_handshakes(self, *, outcome: str | None = None) -> list[dict]:
        query = "SELECT * FROM handshakes"
        params: list = []
        if outcome:
            query += " WHERE outcome = ?"
            params.append(outcome)
        query += " ORDER BY completed_at"
        cursor = await self.db.execute(query, params)
        rows = await cursor.fetchall()
        result = []
        for row in rows:
            d = dict(row)
            d["requested_scope"] = json.loads(d["requested_scope"])
            result.append(d)
        return result


async def persist_session(
    storage: StorageEngine | None,
    controller: HandshakeController,
    telemetry: RecordingTelemetrySink,
) -> None:
    """Flush one finished handshake's telemetry and audit row.

    No-op without storage or before delivery. Storage errors are logged; the
    handshake result has already been delivered by then.
    """
    if storage is None or controller.request is None or controller.result is None:
        return
    request = controller.request
    records = telemetry.drain(request.correlation_token)
    try:
        if records:
            await storage.append_telemetry(records)
        await storage.record_handshake(
            correlation_token=request.correlation_token,
            provider=request.provider_kind.value,
            requested_scope=list(request.requested_scope),
            outcome=controller.result.outcome.value,
            exit_path=controller.exit_path.value if controller.exit_path else None,
        )
    except Exception:
        logger.exception("Failed to persist handshake %s", request.correlation_token)

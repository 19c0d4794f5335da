import aiosqlite
import structlog

from ticketing.config import settings

logger = structlog.get_logger()

_db: aiosqlite.Connection | None = None

DDL_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE COLLATE NOCASE,
        full_name TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'attendee'
            CHECK (role IN ('attendee', 'organizer', 'staff', 'admin')),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS events (
        id TEXT PRIMARY KEY,
        organizer_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE RESTRICT,
        title TEXT NOT NULL,
        slug TEXT NOT NULL UNIQUE,
        description TEXT,
        start_date TEXT NOT NULL,
        end_date TEXT NOT NULL,
        location TEXT NOT NULL,
        capacity INTEGER NOT NULL CHECK (capacity > 0),
        image_url TEXT,
        status TEXT NOT NULL DEFAULT 'draft'
            CHECK (status IN ('draft', 'published', 'cancelled', 'completed')),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        published_at TEXT,
        cancelled_at TEXT,
        cancellation_reason TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_organizer_id ON events(organizer_id)",
    "CREATE INDEX IF NOT EXISTS idx_events_status_start ON events(status, start_date)",
    """
    CREATE TABLE IF NOT EXISTS ticket_types (
        id TEXT PRIMARY KEY,
        event_id TEXT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        description TEXT,
        price REAL NOT NULL CHECK (price >= 0),
        quantity INTEGER NOT NULL CHECK (quantity > 0),
        available INTEGER NOT NULL CHECK (available >= 0 AND available <= quantity),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_ticket_types_event_name
        ON ticket_types(event_id, name COLLATE NOCASE)
    """,
    """
    CREATE TABLE IF NOT EXISTS registrations (
        id TEXT PRIMARY KEY,
        event_id TEXT NOT NULL REFERENCES events(id) ON DELETE RESTRICT,
        user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE RESTRICT,
        ticket_type_id TEXT NOT NULL REFERENCES ticket_types(id) ON DELETE RESTRICT,
        ticket_code TEXT NOT NULL UNIQUE,
        qr_data TEXT NOT NULL UNIQUE,
        status TEXT NOT NULL DEFAULT 'confirmed'
            CHECK (status IN ('confirmed', 'checked_in', 'cancelled')),
        checked_in_at TEXT,
        checked_in_by TEXT REFERENCES profiles(id) ON DELETE SET NULL,
        cancelled_at TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_registrations_event_status ON registrations(event_id, status)",
    "CREATE INDEX IF NOT EXISTS idx_registrations_user_id ON registrations(user_id)",
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_registrations_active
        ON registrations(event_id, user_id, ticket_type_id)
        WHERE status != 'cancelled'
    """,
    """
    CREATE TABLE IF NOT EXISTS check_ins (
        id TEXT PRIMARY KEY,
        registration_id TEXT NOT NULL REFERENCES registrations(id) ON DELETE CASCADE,
        staff_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE RESTRICT,
        method TEXT NOT NULL CHECK (method IN ('qr', 'manual')),
        location TEXT,
        device_info TEXT,
        timestamp TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS staff_assignments (
        id TEXT PRIMARY KEY,
        event_id TEXT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
        staff_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        assigned_by TEXT NOT NULL REFERENCES profiles(id) ON DELETE RESTRICT,
        role TEXT,
        created_at TEXT NOT NULL,
        UNIQUE(event_id, staff_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS domain_events (
        event_id TEXT PRIMARY KEY,
        aggregate_type TEXT NOT NULL,
        aggregate_id TEXT NOT NULL,
        event_type TEXT NOT NULL,
        payload TEXT NOT NULL,
        version INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        UNIQUE(aggregate_id, version)
    )
    """,
]


async def open_database(path: str) -> aiosqlite.Connection:
    db = await aiosqlite.connect(path)
    db.row_factory = aiosqlite.Row
    if path != ":memory:":
        await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")

    for ddl in DDL_STATEMENTS:
        await db.execute(ddl)
    await db.commit()
    return db


async def init_database(path: str | None = None) -> None:
    global _db
    db_path = path or settings.db_path
    _db = await open_database(db_path)
    logger.info("database_initialized", path=db_path)


async def close_database() -> None:
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("database_closed")


def get_db() -> aiosqlite.Connection:
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db


async def check_health() -> None:
    db = get_db()
    cursor = await db.execute("SELECT 1")
    await cursor.close()

"""
Database engine + session factory.

Defaults to SQLite for local dev; production points DATABASE_URL at the
Supabase Postgres instance. The schema is owned by Supabase migrations, so
nothing here creates or alters tables.
"""
import uuid
from datetime import datetime, date

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from smartcrm.config import DATABASE_URL


class Base(DeclarativeBase):

    def to_dict(self):
        """Column values keyed by attribute name, dates as ISO strings."""
        out = {}
        for attr in self.__mapper__.column_attrs:
            value = getattr(self, attr.key)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            out[attr.key] = value
        return out


def new_id():
    """Supabase tables key on UUIDs; stored as text so SQLite behaves the same."""
    return str(uuid.uuid4())


# Supabase hands out postgres:// URLs but SQLAlchemy 2.x requires postgresql://
url = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

if url.startswith('sqlite'):
    engine = create_engine(url, connect_args={'check_same_thread': False})
else:
    engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)

SessionLocal = sessionmaker(bind=engine)


def get_session():
    """Return a new DB session."""
    return SessionLocal()

# valuegraph/db.py
"""Database engine and session utilities.

The console keeps its working state in memory; the database only holds the
persisted snapshot row. Any SQLAlchemy URL works, SQLite is the default.
"""
import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

load_dotenv()

DATABASE_URL = os.getenv("VALUEGRAPH_DATABASE_URL", "sqlite:///./valuegraph.db")
STORAGE_KEY = os.getenv("VALUEGRAPH_STORAGE_KEY", "value-graph-storage")

# Normalize SQLAlchemy URL scheme (SQLAlchemy 2.x doesn't accept 'postgres://')
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)


def make_engine(url=DATABASE_URL):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    # tuned pool settings for cloud DB
    return create_engine(
        url,
        pool_size=int(os.getenv("DB_POOL_SIZE", 5)),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", 10)),
        pool_pre_ping=True
    )


engine = make_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# backend/stackr/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from ..core.config import SQLALCHEMY_DATABASE_URL

engine=create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={} if not SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {"check_same_thread": False},
    pool_pre_ping=True,
    echo=False,
    future=True
    )

SessionLocal=sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True
)

def get_db():
    db=SessionLocal()             # one session per request
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

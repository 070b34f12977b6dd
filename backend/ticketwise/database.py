from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from ticketwise.config import settings

# SQLite needs the connection shared across threads (TestClient, dev server)
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Checks connections before use
    connect_args=connect_args,
    echo=False
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base for the models
Base = declarative_base()


def get_db():
    """
    Dependency yielding a database session
    Used with FastAPI Depends
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

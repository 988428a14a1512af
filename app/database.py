from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from .config import settings

if settings.DATABASE_URL.startswith("sqlite"):
    # Local development and tests share a single connection
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    # Configure engine with connection pooling and timeouts
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=10,           # Number of connections to maintain in pool
        max_overflow=20,        # Additional connections beyond pool_size
        pool_timeout=30,        # Timeout waiting for connection from pool
        pool_recycle=3600,      # Recycle connections after 1 hour
        pool_pre_ping=True,     # Validate connections before use
        connect_args={
            "connect_timeout": 10,  # Connection timeout
            "options": "-c statement_timeout=30000"  # 30 second query timeout
        } if "postgresql" in settings.DATABASE_URL else {}
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

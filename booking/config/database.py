"""Database configuration and connection setup"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from booking.config.settings import get_settings

settings = get_settings()

# Create database engine with connection pooling
engine = create_engine(
    settings.DATABASE_URL,
    poolclass=QueuePool,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Overlap guard for appointments. The application never locks; the database
# rejects the second of two overlapping inserts with SQLSTATE 23P01.
NO_OVERLAP_CONSTRAINT = "no_overlapping_appointments"

NO_OVERLAP_CONSTRAINT_DDL = f"""
ALTER TABLE appointments
ADD CONSTRAINT {NO_OVERLAP_CONSTRAINT}
EXCLUDE USING gist (
    staff_id WITH =,
    tsrange(appointment_date + start_time, appointment_date + end_time) WITH &&
)
WHERE (status IN ('confirmed', 'pending'));
"""


def get_db():
    """Database dependency for FastAPI"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create all database tables plus the appointment overlap constraint"""
    from booking.models import Base

    print("Creating required extensions...")
    with engine.connect() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS btree_gist;"))
        conn.commit()

    print("Creating all tables...")
    Base.metadata.create_all(bind=engine)

    print("Creating appointment overlap constraint...")
    with engine.connect() as conn:
        result = conn.execute(
            text("SELECT 1 FROM pg_constraint WHERE conname = :name;"),
            {"name": NO_OVERLAP_CONSTRAINT}
        ).fetchone()
        if not result:
            conn.execute(text(NO_OVERLAP_CONSTRAINT_DDL))
        conn.commit()

    print("Database tables created successfully!")


if __name__ == "__main__":
    create_tables()

import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is not set")

Base = declarative_base()

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # sync endpoints run in the threadpool
    connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URL, connect_args=connect_args)

if DATABASE_URL.startswith("sqlite"):

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables():
    # Import for side effects: every ORM class must be registered on Base.
    from donorhub.data.repositories import (  # noqa: F401
        campaign_repository,
        donation_repository,
        donor_repository,
        task_repository,
        user_repository,
    )

    Base.metadata.create_all(bind=engine)

# backend/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from config import settings

# 1. Database URL from the environment (.env) or the local SQLite default
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# 2. Hosted PostgreSQL often reports postgres://, SQLAlchemy requires postgresql://
if SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

# 3. Driver specific connection arguments
if "sqlite" in SQLALCHEMY_DATABASE_URL:
    connect_args = {"check_same_thread": False} # SQLite only
else:
    connect_args = {}


def use_immediate_transactions(engine):
    """
    SQLite ignores SELECT ... FOR UPDATE. Starting every transaction with
    BEGIN IMMEDIATE takes the database write lock up front, so concurrent
    writers (threads or worker processes) wait their turn instead of failing
    when a read lock is upgraded.
    """
    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        # SQLAlchemy emits BEGIN itself
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def is_file_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and url not in ("sqlite://", "sqlite:///:memory:")


engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args
)
if is_file_sqlite(SQLALCHEMY_DATABASE_URL):
    use_immediate_transactions(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    # Import models so every table is registered on Base.metadata
    import models.users  # noqa: F401
    import models.medicine  # noqa: F401
    import models.cart  # noqa: F401
    import models.checkout  # noqa: F401
    import models.order  # noqa: F401
    import models.stock  # noqa: F401
    import models.log  # noqa: F401
    Base.metadata.create_all(bind=engine)

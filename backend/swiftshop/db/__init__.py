import importlib
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from swiftshop.config import settings

log = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # sessions are handed between FastAPI's threadpool workers
    connect_args["check_same_thread"] = False

engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# model modules that must be imported so metadata is populated
MODEL_MODULES = [
    "swiftshop.models.item",
    "swiftshop.models.cart",
    "swiftshop.models.cart_line",
    "swiftshop.models.receipt",
    "swiftshop.models.idempotency",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    With reset=True all tables are dropped and recreated, which is what the
    test suite and RESET_DB=1 use to start from an empty database.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset:
        log.info("Resetting database %s", DATABASE_URL)
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.info("Database initialized")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# largest value every supported backend stores in an INTEGER column
SQL_INT_MAX = 2**31 - 1

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    # If using sqlite, ensure check_same_thread option
    connect_args = {"check_same_thread": False} if database_url.startswith('sqlite') else {}
    kwargs = {}
    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        # one shared connection so every session sees the same in-memory db
        kwargs['poolclass'] = StaticPool
    # create engine with pool_pre_ping for reliability with some DB providers
    return create_engine(database_url, connect_args=connect_args, pool_pre_ping=True, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def ping(engine: Engine) -> None:
    """Open a connection and run a trivial query. Raises on failure."""
    with engine.connect() as conn:
        conn.execute(text('SELECT 1'))

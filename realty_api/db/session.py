from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from realty_api.core.config import Settings, settings


def create_engine_with_settings(app_settings: Settings):
    """Build the engine for the configured backend."""
    url = make_url(app_settings.DATABASE_URL)
    backend = url.get_backend_name()
    connect_args = {}
    engine_kwargs = {"echo": app_settings.DB_ECHO}

    if backend.startswith("postgresql"):
        connect_args["options"] = "-c timezone=utc"
        engine_kwargs["pool_pre_ping"] = True
    elif backend == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise each checkout sees an empty database
            engine_kwargs["poolclass"] = StaticPool

    return create_engine(url, connect_args=connect_args, **engine_kwargs)


engine = create_engine_with_settings(settings)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

"""SQLAlchemy engine, schema and transaction scope."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from food_tracker.adapters.sqlalchemy_tables import Base
from food_tracker.domain.errors import StorageError

_MEMORY_DATABASES = {None, "", ":memory:"}


class Database:
    """Owns the engine and the unit of work shared by the repositories.

    Repository calls made inside ``transaction()`` share one session and are
    committed or rolled back together. Outside of it every call commits its
    own short-lived session. Errors from SQLAlchemy surface as
    ``StorageError``.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self._active: Session | None = None

    @classmethod
    def create(cls, url: str, echo: bool = False) -> "Database":
        """Create a database for a SQLAlchemy URL."""
        url_info = make_url(url)
        options: dict[str, object] = {"echo": echo}
        if url_info.get_backend_name() == "sqlite":
            options["connect_args"] = {"check_same_thread": False}
            if url_info.database in _MEMORY_DATABASES:
                options["poolclass"] = StaticPool
        return cls(create_engine(url, **options))

    def create_schema(self) -> None:
        """Create missing tables."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed repository calls atomically."""
        if self._active is not None:
            yield
            return
        try:
            with self._session_factory.begin() as session:
                self._active = session
                try:
                    yield
                finally:
                    self._active = None
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield the active transaction's session or a new committed one."""
        if self._active is not None:
            yield self._active
            return
        try:
            with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

from pathlib import Path

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from modvalley.models.kv_store import Base, KeyValueEntry


class KeyValueStoreController:
    """
    Client-local key-value store backed by SQLite.

    Values are opaque strings (JSON by convention). `write` stores several
    slots in a single transaction.
    """

    def __init__(self, db: Path | str) -> None:
        # Ensure parent directory exists before opening SQLite file
        db_path = Path(db) if not isinstance(db, Path) else db
        try:
            if db_path.parent:
                db_path.parent.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            logger.exception(
                f"Failed to ensure database directory exists for {db_path}: {e}"
            )

        self.db_path = db_path
        self.engine = create_engine(f"sqlite+pysqlite:///{db_path}")
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

    def read(self, key: str) -> str | None:
        """Get the raw value of a slot.

        :param key: The slot name.
        :type key: str
        :return: The stored value, or None if the slot is absent.
        :rtype: str | None
        """
        with self.Session() as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry is not None else None

    def write(self, values: dict[str, str]) -> None:
        """Store one or more slots atomically.

        :param values: Mapping of slot name to value.
        :type values: dict[str, str]
        :raises SQLAlchemyError: if the transaction fails; nothing is written.
        """
        with self.Session() as session:
            try:
                for key, value in values.items():
                    session.merge(KeyValueEntry(key=key, value=value))
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.exception(f"Failed to write slots {list(values)}: {e}")
                raise

from sqlalchemy import Column, DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class KeyValueEntry(Base):
    __tablename__ = "client_store"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    # JSON encoded payload
    value: Mapped[str] = mapped_column(Text, default="null")
    db_time_touched = Column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"Key: {self.key}, Value: {self.value[:64]}"

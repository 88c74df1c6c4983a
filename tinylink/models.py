import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import String, DateTime, BigInteger, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from .database import Base

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Link(Base):
    __tablename__ = "links"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(8), unique=True, index=True, nullable=False)
    original_url: Mapped[str] = mapped_column(String, nullable=False)
    click_count: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    last_clicked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Set client side so ordering has sub-second resolution on every backend
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True, nullable=False)

    __table_args__ = (
        CheckConstraint("click_count >= 0", name="ck_links_click_count_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Link code={self.code!r} clicks={self.click_count}>"

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String, Text

from gs_portfolio.core.database import Base
from gs_portfolio.core.security import utcnow


class GSFile(Base):
    __tablename__ = "gs_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    file_size = Column(BigInteger, nullable=False)
    file_path = Column(String(512), nullable=False)
    thumbnail_path = Column(String(512), nullable=True)
    mime_type = Column(String(255), nullable=False)
    upload_date = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_date = Column(DateTime, default=utcnow, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

from sqlalchemy import Column, String, BigInteger, Text, DateTime
from sqlalchemy.sql import func
from ytharvest.core.database import Base

class SearchConfig(Base):
    __tablename__ = "search_configs"

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, default="default_user")
    search_name = Column(String(255), nullable=False, unique=True)
    search_phrase = Column(Text, nullable=False)
    creation_date = Column(DateTime(timezone=True), server_default=func.now())

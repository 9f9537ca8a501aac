from sqlalchemy import Column, BigInteger, Integer, Text
from .db import Base
from .settings import settings

class Group(Base):
    __tablename__ = settings.GROUP_TABLE
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    title = Column(Text)
    description = Column(Text)
    writer = Column(Text)
    # Kept as text: the hosted store hands back naive and offset-carrying strings alike
    created_at = Column(Text)

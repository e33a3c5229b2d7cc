"""World State Model - latest committed value of every key"""
from sqlalchemy import Column, Integer, String, Text, LargeBinary, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from asset_api.database import Base


class WorldState(Base):
    """World State Model
    
    One row per live key, scoped to a channel and a chaincode namespace
    `version` is the id of the transaction that last wrote the key and is
    what MVCC validation compares against
    """
    __tablename__ = "world_state"
    
    id = Column(Integer, primary_key=True, index=True)
    channel = Column(String(100), nullable=False)
    namespace = Column(String(100), nullable=False)
    key = Column(Text, nullable=False)
    value = Column(LargeBinary, nullable=False)
    version = Column(String(64), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    __table_args__ = (
        UniqueConstraint('channel', 'namespace', 'key', name='uq_world_state_key'),
    )
    
    def __repr__(self):
        return f"<WorldState(channel='{self.channel}', namespace='{self.namespace}', key='{self.key}', version='{self.version}')>"

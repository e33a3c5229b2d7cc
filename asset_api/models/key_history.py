"""Key History Model - every committed change to a key, including deletes"""
from sqlalchemy import Column, Integer, String, Text, LargeBinary, Boolean, DateTime, Index
from asset_api.database import Base


class KeyHistory(Base):
    """Key History Model
    
    Append-only; rows are never updated
    Commit order for a key is insertion order (ascending id)
    """
    __tablename__ = "key_history"
    
    id = Column(Integer, primary_key=True, index=True)
    channel = Column(String(100), nullable=False)
    namespace = Column(String(100), nullable=False)
    key = Column(Text, nullable=False)
    tx_id = Column(String(64), nullable=False)
    value = Column(LargeBinary)  # NULL for deletes
    is_delete = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    
    __table_args__ = (
        Index('idx_key_history_key', 'channel', 'namespace', 'key', 'id'),
    )
    
    def __repr__(self):
        return f"<KeyHistory(id={self.id}, key='{self.key}', tx_id='{self.tx_id}', is_delete={self.is_delete})>"

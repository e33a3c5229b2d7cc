"""Ledger Transaction Model - one row per transaction that reached commit"""
from sqlalchemy import Column, Integer, String, DateTime, Enum, Index
import enum
from asset_api.database import Base


class ValidationCode(str, enum.Enum):
    """Commit validation outcome"""
    VALID = "VALID"
    MVCC_READ_CONFLICT = "MVCC_READ_CONFLICT"


class LedgerTransaction(Base):
    """Ledger Transaction Model
    
    Invalid transactions are recorded too; only VALID ones changed state
    """
    __tablename__ = "ledger_transactions"
    
    id = Column(Integer, primary_key=True, index=True)
    tx_id = Column(String(64), unique=True, nullable=False, index=True)
    channel = Column(String(100), nullable=False)
    chaincode = Column(String(100), nullable=False)
    function = Column(String(100), nullable=False)
    creator_msp_id = Column(String(100), nullable=False)
    validation_code = Column(Enum(ValidationCode), nullable=False)
    committed_at = Column(DateTime(timezone=True), nullable=False)
    
    __table_args__ = (
        Index('idx_ledger_tx_committed', 'channel', 'committed_at'),
    )
    
    def __repr__(self):
        return f"<LedgerTransaction(tx_id='{self.tx_id}', function='{self.function}', code={self.validation_code})>"

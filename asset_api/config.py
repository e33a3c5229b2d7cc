from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    DATABASE_URL: str = "sqlite+aiosqlite:///./ledger.db"
    APP_NAME: str = "Asset REST API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    
    # Network identity and endpoint
    MSP_ID: str = "Org1MSP"
    CERT_PATH: Optional[str] = None
    KEY_PATH: Optional[str] = None
    TLS_CERT_PATH: Optional[str] = None
    PEER_ENDPOINT: str = "localhost:7051"
    GATEWAY_PEER: str = "peer0.org1.example.com"
    
    CHANNEL_NAME: str = "mychannel"
    CHAINCODE_NAME: str = "asset"
    
    # Gateway deadlines, in seconds
    EVALUATE_TIMEOUT: float = 5.0
    ENDORSE_TIMEOUT: float = 15.0
    SUBMIT_TIMEOUT: float = 5.0
    COMMIT_STATUS_TIMEOUT: float = 60.0
    
    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

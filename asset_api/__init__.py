"""Asset REST API - HTTP façade over the asset chaincode"""

__version__ = "1.0.0"

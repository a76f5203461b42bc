# constants.py
APP_NAME = "Settlement Desk"

DATA_DIR = "data"
DB_FILE_NAME = "settlements.db"
LOG_FILE_NAME = "settlement.log"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

# Decimal places used when no company setting is supplied
DEFAULT_AMT_DEC = 2
DEFAULT_LOC_AMT_DEC = 2
DEFAULT_EXH_RATE_DEC = 6

# Settlement types
SETTLEMENT_AP_DOCSETOFF = "ap_docsetoff"
SETTLEMENT_AR_RECEIPT = "ar_receipt"
SETTLEMENT_TYPES: tuple[str, ...] = (SETTLEMENT_AP_DOCSETOFF, SETTLEMENT_AR_RECEIPT)

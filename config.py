import os
from dotenv import load_dotenv

load_dotenv()

# Initialize Sentry early, before the app and its blueprint are imported.
# Error reporting stays off unless SENTRY_DSN is set.
_sentry_dsn = os.getenv("SENTRY_DSN")
if _sentry_dsn:
    import sentry_sdk
    sentry_sdk.init(
        dsn=_sentry_dsn,
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        environment=os.getenv("FLASK_ENV", "production"),
    )


class Config:
    # Flask
    FLASK_SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "fleetcalc-secret-key-change-in-production")
    DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"
    PORT = int(os.getenv("FLASK_PORT", "5002"))

    # Storage
    # DATA_DIR holds the sqlite file that backs the equipment directory.
    DATA_DIR = os.getenv("DATA_DIR", "data" if os.path.exists("data") else ".")
    FLEET_DB = os.getenv("FLEET_DB", os.path.join(DATA_DIR, "equipment_directory.db"))

    # Logging
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

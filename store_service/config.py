# store_service/config.py

"""
Environment-driven settings shared by the API and the email worker.
Every value has a default suitable for local development.
"""
import os

# Read DB settings from environment variables, with defaults for local/dev
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_DB = os.getenv("POSTGRES_DB", "store")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "localhost")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")

# A full URL wins over the individual parts (tests point this at SQLite)
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "postgresql://"
    f"{POSTGRES_USER}:{POSTGRES_PASSWORD}@"
    f"{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# Message queue
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
AUTH_EMAIL_QUEUE = os.getenv("AUTH_EMAIL_QUEUE", "auth-email")
ORDER_EMAIL_QUEUE = os.getenv("ORDER_EMAIL_QUEUE", "order-email")
QUEUE_POLL_TIMEOUT_SECONDS = int(os.getenv("QUEUE_POLL_TIMEOUT_SECONDS", "5"))
QUEUE_MAX_RETRIES = int(os.getenv("QUEUE_MAX_RETRIES", "5"))
QUEUE_RETRY_DELAY_SECONDS = float(os.getenv("QUEUE_RETRY_DELAY_SECONDS", "1"))

# Outgoing mail
SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_FROM = os.getenv("SMTP_FROM", "no-reply@store.local")
SMTP_START_TLS = os.getenv("SMTP_START_TLS", "true").lower() in ("1", "true", "yes")

# Links and one-time codes
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")
OTP_LENGTH = int(os.getenv("OTP_LENGTH", "6"))
OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", "5"))

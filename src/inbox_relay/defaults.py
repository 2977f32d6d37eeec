"""Default values shared across modules."""

DEFAULT_INBOX_LIMIT = 10
DEFAULT_REMOTE_TIMEOUT = 30.0
DEFAULT_STORE_TIMEOUT = 5.0
DEFAULT_SESSION_MAX_AGE = 24 * 60 * 60
DEFAULT_DATABASE_URL = "sqlite:///inbox-relay.db"

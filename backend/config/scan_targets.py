# Tables and storage buckets checked by the maintenance scanners.

# Tables the app cannot run without.
CRITICAL_TABLES = [
    "profiles",
    "families",
    "user_roles",
    "calendar_events",
    "expenses",
    "incidents",
]

# Tables holding per-family private data that must sit behind RLS.
SENSITIVE_TABLES = [
    "profiles",
    "user_roles",
    "expenses",
    "incidents",
    "messages",
    "files",
]

REQUIRED_BUCKETS = ["receipts", "documents", "avatars", "incident-attachments"]

PUBLIC_BUCKETS = ["avatars"]
PRIVATE_BUCKETS = ["receipts", "documents", "incident-attachments"]

# Postgres error code for "relation does not exist"
UNDEFINED_TABLE_CODE = "42P01"

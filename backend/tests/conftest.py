import os

# settings are read once at import time; keep the app off the on-disk database
os.environ.setdefault("TIMESHEET_DATABASE_URL", "sqlite://")
os.environ.setdefault("TIMESHEET_ENV", "test")

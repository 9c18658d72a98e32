import os

# keep cli runs in tests from writing rotating log files
os.environ.setdefault("LOG_DIR", "")

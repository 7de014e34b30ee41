import os
import hashlib
from loguru import logger
from swiggy.tools.config import LOG_DIR

def add_file_sink(name: str, log_dir: str = None) -> int:
    """Attach a rotating log file for a script. Returns the loguru sink id."""
    log_path = os.path.join(log_dir or LOG_DIR, f"{name}.log")
    return logger.add(log_path, rotation="5 MB", retention="7 days")

def compute_sha256(data: bytes) -> str:
    """Compute SHA-256 hash of byte content."""
    return hashlib.sha256(data).hexdigest()

def file_exists_with_same_hash(path: str, new_bytes: bytes) -> bool:
    """Check if a file exists at `path` and matches the hash of `new_bytes`."""
    if not os.path.exists(path):
        return False
    with open(path, "rb") as f:
        existing_bytes = f.read()
    return compute_sha256(existing_bytes) == compute_sha256(new_bytes)

def save_file_if_changed(path: str, file_bytes: bytes) -> bool:
    """
    Save file only if it's missing or has changed.
    Returns True if file was saved or updated.
    """
    if file_exists_with_same_hash(path, file_bytes):
        return False
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "wb") as f:
        f.write(file_bytes)
    return True

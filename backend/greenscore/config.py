# backend/greenscore/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/greenscore.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///greenscore.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Advisory edit locks on materials expire after this many minutes
    EDIT_LOCK_TIMEOUT_MINUTES = int(os.environ.get("EDIT_LOCK_TIMEOUT_MINUTES", "15"))

    # Platform fee booked on every order, as a fraction of the order total
    PLATFORM_FEE_RATE = float(os.environ.get("PLATFORM_FEE_RATE", "0.05"))

    COMMIT_RETRY_ATTEMPTS = int(os.environ.get("COMMIT_RETRY_ATTEMPTS", "3"))

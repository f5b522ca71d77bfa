"""
Database initialization script.

Run this script to create database tables and seed the admin account
from ADMIN_EMAIL / ADMIN_PASSWORD_HASH.

Usage:
    python scripts/init_db.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from faaxis.core.logging_config import setup_logging
from faaxis.db.init_db import init_db

if __name__ == "__main__":
    setup_logging()
    print("=" * 50)
    print("FA Axis Database Initialization")
    print("=" * 50)
    print()

    try:
        init_db()
        print()
        print("=" * 50)
        print("SUCCESS: Database initialized!")
        print("=" * 50)
        sys.exit(0)

    except Exception as e:
        print()
        print("=" * 50)
        print("ERROR: Database initialization failed!")
        print(f"Details: {e}")
        print("=" * 50)
        sys.exit(1)

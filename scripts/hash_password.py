"""
Print a bcrypt hash for ADMIN_PASSWORD_HASH.

Usage:
    python scripts/hash_password.py
"""

import getpass
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from faaxis.core.security import get_password_hash

if __name__ == "__main__":
    password = getpass.getpass("Admin password: ")
    if password != getpass.getpass("Repeat: "):
        print("Passwords do not match")
        sys.exit(1)
    if len(password) < 8:
        print("Password must be at least 8 characters")
        sys.exit(1)
    print(get_password_hash(password))

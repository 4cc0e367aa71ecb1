"""
Create a staff account.

Usage:
  python scripts/create_staff_user.py <username> <role> "<full name>"

The password is read from the terminal. Roles: admin, barangay_captain,
barangay_official, secretary, sk_chairman.
"""
import getpass
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fastapi import HTTPException

from app.db.session import SessionLocal
from app.services.staff_service import create_staff_user


def main():
    if len(sys.argv) != 4:
        print(__doc__)
        sys.exit(2)
    username, role, full_name = sys.argv[1:4]
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match")
        sys.exit(1)

    db = SessionLocal()
    try:
        staff = create_staff_user(db, username, password, full_name, role)
        print(f"Created staff user id={staff.id} username={staff.username} role={staff.role}")
    except HTTPException as e:
        print(f"Error: {e.detail}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()

"""
Quick script to seed the initial admin and one demo account per staff role
Run this on a fresh local database
"""
from app.core.logging import setup_logging
from app.db.init_db import DEMO_PASSWORD, init_db
from app.db.session import SessionLocal

if __name__ == "__main__":
    setup_logging()
    db = SessionLocal()
    try:
        created = init_db(db)
        if not created:
            print("All staff accounts already exist, nothing to do")
        for staff in created:
            print(f"Created {staff.role}: username={staff.username}")
        if created:
            print(f"Demo accounts use password: {DEMO_PASSWORD}")
    finally:
        db.close()

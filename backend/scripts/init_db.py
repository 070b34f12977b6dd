"""
Initializes the database: creates every table and the first ADMIN user.

Usage:
    python scripts/init_db.py --email admin@center.ma --password StrongPass123 --first-name Admin
"""
import sys
import os
import argparse

# Add the backend directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ticketwise.database import engine, SessionLocal
from ticketwise.models import Base, User, UserRole
from ticketwise.core.security import hash_password


def create_tables():
    """Creates every table"""
    print("[*] Creating tables...")
    Base.metadata.create_all(bind=engine)
    print("[+] Tables created")


def create_admin_user(email: str, password: str, first_name: str, last_name: str):
    """Creates the first ADMIN, unless that email already exists"""
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"[!] User {email} already exists")
            return

        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
            active=True
        )
        db.add(user)
        db.commit()
        print(f"[+] ADMIN user created: {email}")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Initialize the TicketWise database")
    parser.add_argument("--email", required=True, help="ADMIN email (login)")
    parser.add_argument("--password", required=True, help="ADMIN password")
    parser.add_argument("--first-name", required=True, help="ADMIN first name")
    parser.add_argument("--last-name", default="", help="ADMIN last name")
    parser.add_argument("--skip-tables", action="store_true", help="Do not create tables")

    args = parser.parse_args()

    print("=" * 50)
    print("DATABASE INITIALIZATION")
    print("=" * 50)

    if len(args.password) < 8:
        print("[ERROR] Password must have at least 8 characters")
        sys.exit(1)

    if not args.skip_tables:
        create_tables()

    create_admin_user(args.email, args.password, args.first_name, args.last_name)

    print("=" * 50)
    print("[+] Initialization done!")
    print(f"[*] Login: {args.email}")
    print("=" * 50)


if __name__ == "__main__":
    main()

"""Grant the Admin role to an existing account: python promote_admin.py user@example.com"""
import sys

import config
import database
from auth import ROLE_ADMIN
from errors import NotFound
from services.user_service import UserService


def promote(db, email: str):
    user = UserService.get_by_email(db, email)
    if not user:
        raise NotFound(f"User '{email}' not found.")
    return UserService.update(db, user.id, {"role": ROLE_ADMIN, "status": "active"})


def main(email: str) -> int:
    database.init_engine(config.DATABASE_URL)
    database.init_db(config.DATABASE_URL)
    db = database.SessionLocal()
    try:
        promote(db, email)
    except NotFound as e:
        print(e.message)
        return 1
    finally:
        db.close()
        database.dispose_engine()
    print(f"{email} is now an Admin")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python promote_admin.py <email>")
        sys.exit(2)
    sys.exit(main(sys.argv[1]))

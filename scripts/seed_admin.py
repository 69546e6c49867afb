"""Seed an administrator user and the default forum categories."""

import os

from app import create_app
from models import db
from models.category import Category
from models.user import Role, User

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123")

DEFAULT_CATEGORIES = (
    ("Engine & Drivetrain", "engine", "Engines, transmissions, clutches and diffs."),
    ("Electrical", "electrical", "Wiring, sensors, ECUs and diagnostics."),
    ("Brakes & Suspension", "brakes-suspension", "Stopping, steering and ride."),
    ("Body & Paint", "body-paint", "Panels, rust repair and refinishing."),
    ("Tools & Shop", "tools", "Tool recommendations and shop setup."),
    ("General", "general", "Everything else."),
)


def main() -> None:
    app = create_app()
    with app.app_context():
        admin = User.query.filter_by(email=ADMIN_EMAIL).first()
        if admin is None:
            admin = User(email=ADMIN_EMAIL, username=ADMIN_USERNAME, role=Role.ADMIN)
            admin.set_password(ADMIN_PASSWORD)
            db.session.add(admin)
            action = "created"
        else:
            admin.role = Role.ADMIN
            admin.is_banned = False
            admin.set_password(ADMIN_PASSWORD)
            action = "updated"

        created = 0
        for order, (name, slug, description) in enumerate(DEFAULT_CATEGORIES):
            if Category.query.filter_by(slug=slug).first() is None:
                db.session.add(
                    Category(
                        name=name, slug=slug, description=description, sort_order=order
                    )
                )
                created += 1

        db.session.commit()
        print(f"Admin user {action}: {ADMIN_EMAIL}")
        print(f"Categories created: {created}")


if __name__ == "__main__":
    main()

"""Rebuild cached post and comment scores from the vote table."""

from app import create_app
from services.voting import recount_scores


def main(app=None) -> int:
    app = app or create_app()
    with app.app_context():
        fixed = recount_scores()
        print(f"Scores corrected: {fixed}")
    return fixed


if __name__ == "__main__":
    main()

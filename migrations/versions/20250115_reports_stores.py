"""add reports, store directory and moderation log"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "reports_stores_20250115"
down_revision = "forum_core_20250101"
branch_labels = None
depends_on = None


TARGET_TYPES = ("post", "comment")
REPORT_STATUSES = ("open", "resolved")
REPORT_ACTIONS = ("dismiss", "remove_target")


def upgrade():
    report_target_type = sa.Enum(*TARGET_TYPES, name="report_target_type")
    report_status = sa.Enum(*REPORT_STATUSES, name="report_status")
    report_action = sa.Enum(*REPORT_ACTIONS, name="report_action")

    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("reporter_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("target_type", report_target_type, nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column(
            "status", report_status, nullable=False, server_default=sa.text("'open'")
        ),
        sa.Column("resolution", report_action, nullable=True),
        sa.Column("resolved_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_reports_status", "reports", ["status"])
    op.create_index("ix_reports_created_at", "reports", ["created_at"])

    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("url", sa.String(length=512), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("submitted_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_stores_category", "stores", ["category"])

    op.create_table(
        "store_votes",
        sa.Column("store_id", sa.Integer(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("positive", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("store_id", "user_id"),
    )

    op.create_table(
        "moderation_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("target_type", sa.String(length=32), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("detail", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_moderation_log_actor_id", "moderation_log", ["actor_id"])
    op.create_index("ix_moderation_log_created_at", "moderation_log", ["created_at"])


def downgrade():
    op.drop_index("ix_moderation_log_created_at", table_name="moderation_log")
    op.drop_index("ix_moderation_log_actor_id", table_name="moderation_log")
    op.drop_table("moderation_log")

    op.drop_table("store_votes")

    op.drop_index("ix_stores_category", table_name="stores")
    op.drop_table("stores")

    op.drop_index("ix_reports_created_at", table_name="reports")
    op.drop_index("ix_reports_status", table_name="reports")
    op.drop_table("reports")

    bind = op.get_bind()
    for name, values in (
        ("report_action", REPORT_ACTIONS),
        ("report_status", REPORT_STATUSES),
        ("report_target_type", TARGET_TYPES),
    ):
        sa.Enum(*values, name=name).drop(bind, checkfirst=True)

"""
Create users, profiles, roles, reports, badges, quiz and contact tables

Revision ID: 20261018_001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = '20261018_001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column("id", sa.String(), primary_key=True)


def _created_at():
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now())


def upgrade():
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "profiles",
        _id(),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("full_name", sa.String()),
        sa.Column("phone", sa.String()),
        sa.Column("city", sa.String()),
        sa.Column("state", sa.String()),
        sa.Column("avatar_url", sa.String()),
        sa.Column("points", sa.Integer(), server_default="0"),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_profiles_points", "profiles", ["points"])

    op.create_table(
        "user_roles",
        _id(),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="user"),
        _created_at(),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
        sa.CheckConstraint("role IN ('admin', 'moderator', 'user')", name="ck_user_roles_role"),
    )

    op.create_table(
        "reports",
        _id(),
        sa.Column("report_number", sa.String(), nullable=False, unique=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("severity", sa.String(), server_default="medium"),
        sa.Column("status", sa.String(), server_default="submitted"),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("address", sa.String()),
        sa.Column("city", sa.String()),
        sa.Column("state", sa.String()),
        sa.Column("pincode", sa.String()),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("image_urls", sa.JSON()),
        sa.Column("assigned_to", sa.String()),
        sa.Column("authority_remarks", sa.Text()),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("resolved_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint(
            "category IN ('garbage', 'pothole', 'streetlight', 'traffic', 'vandalism', "
            "'water_supply', 'drainage', 'other')",
            name="ck_reports_category",
        ),
        sa.CheckConstraint("severity IN ('low', 'medium', 'high', 'critical')", name="ck_reports_severity"),
        sa.CheckConstraint(
            "status IN ('submitted', 'in_review', 'assigned', 'in_progress', 'resolved', 'rejected')",
            name="ck_reports_status",
        ),
    )
    op.create_index("ix_reports_user_id", "reports", ["user_id"])
    op.create_index("ix_reports_status", "reports", ["status"])
    op.create_index("ix_reports_created_at", "reports", ["created_at"])

    op.create_table(
        "report_comments",
        _id(),
        sa.Column("report_id", sa.String(), sa.ForeignKey("reports.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("is_authority", sa.Boolean(), server_default=sa.false()),
        _created_at(),
    )
    op.create_index("ix_report_comments_report_id", "report_comments", ["report_id"])

    op.create_table(
        "badges",
        _id(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String()),
        sa.Column("icon", sa.String()),
        sa.Column("points_required", sa.Integer()),
        _created_at(),
    )

    op.create_table(
        "user_badges",
        _id(),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("badge_id", sa.String(), sa.ForeignKey("badges.id", ondelete="CASCADE"), nullable=False),
        sa.Column("earned_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_user_badges_user_id", "user_badges", ["user_id"])

    op.create_table(
        "quiz_categories",
        _id(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String()),
        sa.Column("icon", sa.String()),
        _created_at(),
    )

    op.create_table(
        "quizzes",
        _id(),
        sa.Column("category_id", sa.String(), sa.ForeignKey("quiz_categories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("options", sa.JSON(), nullable=False),
        sa.Column("correct_answer", sa.Integer(), nullable=False),
        sa.Column("points", sa.Integer(), server_default="10"),
        _created_at(),
    )
    op.create_index("ix_quizzes_category_id", "quizzes", ["category_id"])

    op.create_table(
        "user_quiz_progress",
        _id(),
        sa.Column("user_id", sa.String(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("quiz_id", sa.String(), sa.ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("answered_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "quiz_id", name="uq_user_quiz_progress_user_quiz"),
    )
    op.create_index("ix_user_quiz_progress_user_id", "user_quiz_progress", ["user_id"])

    op.create_table(
        "contact_messages",
        _id(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("subject", sa.String(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), server_default=sa.false()),
        _created_at(),
    )


def downgrade():
    for table in (
        "contact_messages",
        "user_quiz_progress",
        "quizzes",
        "quiz_categories",
        "user_badges",
        "badges",
        "report_comments",
        "reports",
        "user_roles",
        "profiles",
        "users",
    ):
        op.drop_table(table)

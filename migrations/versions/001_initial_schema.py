"""Initial change tracking schema

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def upgrade() -> None:
    # Create entity_versions table
    op.create_table(
        "entity_versions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("org_id", sa.String(255), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(255), nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("data", postgresql.JSONB, nullable=False),
        sa.Column("delta", postgresql.JSONB, nullable=True),
        sa.Column("changed_fields", postgresql.JSONB, nullable=False),
        sa.Column("change_type", sa.String(20), nullable=False),
        sa.Column("change_summary", sa.Text, nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        _created_at(),
    )
    op.create_index(
        "idx_entity_version_unique",
        "entity_versions",
        ["entity_type", "entity_id", "version"],
        unique=True,
    )
    op.create_index("idx_entity_version_org_created", "entity_versions", ["org_id", "created_at"])
    op.create_index(
        "idx_entity_version_org_change_type", "entity_versions", ["org_id", "change_type"]
    )
    op.create_index("idx_entity_version_created_by", "entity_versions", ["created_by"])

    # Create analysis_history table
    op.create_table(
        "analysis_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("org_id", sa.String(255), nullable=False),
        sa.Column("analysis_type", sa.String(50), nullable=False),
        sa.Column("reference_id", sa.String(255), nullable=False),
        sa.Column("analysis_version", sa.Integer, nullable=False),
        sa.Column("results", postgresql.JSONB, nullable=False),
        sa.Column("ai_insights", postgresql.JSONB, nullable=False),
        sa.Column("key_metrics", postgresql.JSONB, nullable=False),
        sa.Column("confidence", sa.Float, nullable=True),
        sa.Column("data_source_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("metadata", postgresql.JSONB, nullable=False),
        _created_at(),
    )
    op.create_index(
        "idx_analysis_history_unique",
        "analysis_history",
        ["analysis_type", "reference_id", "analysis_version"],
        unique=True,
    )
    op.create_index("idx_analysis_history_org", "analysis_history", ["org_id"])

    # Create change_alerts table
    op.create_table(
        "change_alerts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("org_id", sa.String(255), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(255), nullable=False),
        sa.Column("alert_type", sa.String(50), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False, server_default="INFO"),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("metric", sa.String(100), nullable=True),
        sa.Column("previous_value", postgresql.JSONB, nullable=True),
        sa.Column("current_value", postgresql.JSONB, nullable=True),
        sa.Column("change_percent", sa.Float, nullable=True),
        sa.Column("threshold", sa.Float, nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_dismissed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("metadata", postgresql.JSONB, nullable=False),
        _created_at(),
    )
    op.create_index(
        "idx_change_alert_org_status", "change_alerts", ["org_id", "is_read", "is_dismissed"]
    )
    op.create_index("idx_change_alert_org_created", "change_alerts", ["org_id", "created_at"])
    op.create_index("idx_change_alert_entity", "change_alerts", ["entity_type", "entity_id"])
    op.create_index("idx_change_alert_severity", "change_alerts", ["severity"])

    # Create change_summaries table
    op.create_table(
        "change_summaries",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("org_id", sa.String(255), nullable=False),
        sa.Column("period", sa.String(20), nullable=False),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("summary_type", sa.String(50), nullable=False, server_default="overview"),
        sa.Column("metrics", postgresql.JSONB, nullable=False),
        sa.Column("highlights", postgresql.JSONB, nullable=False),
        sa.Column("new_items", sa.Integer, nullable=False, server_default="0"),
        sa.Column("updated_items", sa.Integer, nullable=False, server_default="0"),
        sa.Column("deleted_items", sa.Integer, nullable=False, server_default="0"),
        sa.Column("significant_changes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("top_changes", postgresql.JSONB, nullable=False),
        _created_at(),
    )
    op.create_index(
        "idx_change_summary_window",
        "change_summaries",
        ["org_id", "period", "period_start", "summary_type"],
        unique=True,
    )

    # Create user_change_trackers table
    op.create_table(
        "user_change_trackers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("org_id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("last_visit", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_seen_changes", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "idx_user_change_tracker_user",
        "user_change_trackers",
        ["org_id", "user_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_table("user_change_trackers")
    op.drop_table("change_summaries")
    op.drop_table("change_alerts")
    op.drop_table("analysis_history")
    op.drop_table("entity_versions")

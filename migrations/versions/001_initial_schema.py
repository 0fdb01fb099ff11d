"""
001 — Initial schema: waste_event + department_baseline

Revision ID: 001
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSON

revision = "001"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = "waste_risk_engine"


def upgrade() -> None:
    op.execute(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")

    op.create_table(
        "waste_event",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(100), nullable=False),
        sa.Column("user_id", sa.String(100), nullable=True),

        sa.Column("department", sa.String(32), nullable=False),
        sa.Column("waste_type", sa.String(32), nullable=False),
        sa.Column("quantity", sa.Float, nullable=False),
        sa.Column("procedure_category", sa.String(32), nullable=False),
        sa.Column("disposal_method", sa.String(32), nullable=False),
        sa.Column("shift", sa.String(16), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),

        sa.Column("risk_score", sa.Integer, nullable=False),
        sa.Column("anomaly_detected", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("assessment", sa.Text, nullable=False),
        sa.Column("recommended_action", sa.Text, nullable=False),
        sa.Column("alert_message", sa.Text, nullable=True),
        sa.Column("factors_json", JSON, nullable=False),
        sa.Column("narrative_source", sa.String(16), nullable=False),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),

        sa.CheckConstraint("risk_score BETWEEN 0 AND 100", name="ck_waste_event_risk_score"),
        sa.CheckConstraint("quantity >= 0", name="ck_waste_event_quantity"),
        schema=SCHEMA,
    )

    op.create_index("ix_waste_event_tenant_id", "waste_event", ["tenant_id"], schema=SCHEMA)
    op.create_index("ix_waste_event_tenant_timestamp", "waste_event", ["tenant_id", "timestamp"], schema=SCHEMA)
    op.create_index(
        "ix_waste_event_tenant_department_timestamp", "waste_event",
        ["tenant_id", "department", "timestamp"], schema=SCHEMA,
    )
    op.create_index("ix_waste_event_anomaly", "waste_event", ["tenant_id", "anomaly_detected"], schema=SCHEMA)

    op.create_table(
        "department_baseline",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.String(100), nullable=False),
        sa.Column("department", sa.String(32), nullable=False),

        sa.Column("expected_daily", sa.Float, nullable=False),
        sa.Column("anomaly_threshold", sa.Float, nullable=False, server_default="70"),
        sa.Column("infectious_ratio", sa.Float, nullable=False, server_default="30"),
        sa.Column("sharps_ratio", sa.Float, nullable=False, server_default="15"),
        sa.Column("cost_per_kg", sa.Float, nullable=False, server_default="2.5"),

        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),

        sa.UniqueConstraint("tenant_id", "department", name="uq_department_baseline_tenant_department"),
        sa.CheckConstraint("expected_daily >= 0", name="ck_department_baseline_expected_daily"),
        sa.CheckConstraint("anomaly_threshold BETWEEN 0 AND 100", name="ck_department_baseline_threshold"),
        schema=SCHEMA,
    )
    op.create_index("ix_department_baseline_tenant_id", "department_baseline", ["tenant_id"], schema=SCHEMA)


def downgrade() -> None:
    op.drop_table("department_baseline", schema=SCHEMA)
    op.drop_table("waste_event", schema=SCHEMA)

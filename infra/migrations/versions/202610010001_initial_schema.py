"""initial report workflow schema

Revision ID: 202610010001
Revises:
Create Date: 2026-10-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "202610010001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("event_id"),
    )
    op.create_index("ix_events_event_type", "events", ["event_type"])
    op.create_index("ix_events_ts", "events", ["ts"])
    op.create_index("ix_events_actor_id", "events", ["actor_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "clients",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("company_name", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("total_bait_stations_inside", sa.Integer(), nullable=False),
        sa.Column("total_bait_stations_outside", sa.Integer(), nullable=False),
        sa.Column("total_insect_monitors_light", sa.Integer(), nullable=False),
        sa.Column("total_insect_monitors_box", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_company_name", "clients", ["company_name"])
    op.create_index("ix_clients_created_at", "clients", ["created_at"])
    op.create_index("ix_clients_updated_at", "clients", ["updated_at"])

    op.create_table(
        "client_pco_assignments",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("pco_id", sa.String(), nullable=False),
        sa.Column("assigned_by", sa.String(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("unassigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("unassigned_by", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["pco_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_client_pco_assignments_client_id", "client_pco_assignments", ["client_id"])
    op.create_index("ix_client_pco_assignments_pco_id", "client_pco_assignments", ["pco_id"])
    op.create_index("ix_client_pco_assignments_status", "client_pco_assignments", ["status"])
    op.create_index("ix_client_pco_assignments_client_pco", "client_pco_assignments", ["client_id", "pco_id"])
    op.create_index(
        "uq_client_pco_assignments_active_client",
        "client_pco_assignments",
        ["client_id"],
        unique=True,
        sqlite_where=sa.text("status = 'active'"),
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "reports",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("pco_id", sa.String(), nullable=False),
        sa.Column("report_type", sa.String(), nullable=False),
        sa.Column("service_date", sa.Date(), nullable=False),
        sa.Column("next_service_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("pco_signature", sa.String(), nullable=True),
        sa.Column("client_signature", sa.String(), nullable=True),
        sa.Column("client_signature_name", sa.String(), nullable=True),
        sa.Column("general_remarks", sa.String(), nullable=True),
        sa.Column("admin_notes", sa.String(), nullable=True),
        sa.Column("recommendations", sa.String(), nullable=True),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("new_bait_stations_count", sa.Integer(), nullable=False),
        sa.Column("new_insect_monitors_count", sa.Integer(), nullable=False),
        sa.Column("expected_bait_stations_inside", sa.Integer(), nullable=True),
        sa.Column("expected_bait_stations_outside", sa.Integer(), nullable=True),
        sa.Column("expected_insect_monitors_light", sa.Integer(), nullable=True),
        sa.Column("expected_insect_monitors_box", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["pco_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reports_client_id", "reports", ["client_id"])
    op.create_index("ix_reports_pco_id", "reports", ["pco_id"])
    op.create_index("ix_reports_service_date", "reports", ["service_date"])
    op.create_index("ix_reports_status", "reports", ["status"])
    op.create_index("ix_reports_created_at", "reports", ["created_at"])
    op.create_index("ix_reports_updated_at", "reports", ["updated_at"])
    op.create_index("ix_reports_client_pco_status", "reports", ["client_id", "pco_id", "status"])
    op.create_index("ix_reports_client_service_date", "reports", ["client_id", "service_date"])

    op.create_table(
        "bait_stations",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("report_id", sa.String(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("station_number", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("is_accessible", sa.Boolean(), nullable=False),
        sa.Column("inaccessible_reason", sa.String(), nullable=True),
        sa.Column("activity_detected", sa.Boolean(), nullable=False),
        sa.Column("activity_droppings", sa.Boolean(), nullable=False),
        sa.Column("activity_gnawing", sa.Boolean(), nullable=False),
        sa.Column("activity_tracks", sa.Boolean(), nullable=False),
        sa.Column("activity_other", sa.Boolean(), nullable=False),
        sa.Column("activity_other_description", sa.String(), nullable=True),
        sa.Column("bait_status", sa.String(), nullable=False),
        sa.Column("station_condition", sa.String(), nullable=False),
        sa.Column("action_taken", sa.String(), nullable=False),
        sa.Column("warning_sign_condition", sa.String(), nullable=False),
        sa.Column("rodent_box_replaced", sa.Boolean(), nullable=False),
        sa.Column("station_remarks", sa.String(), nullable=True),
        sa.Column("is_new_addition", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["report_id"], ["reports.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bait_stations_report_id", "bait_stations", ["report_id"])
    op.create_index("ix_bait_stations_report_location", "bait_stations", ["report_id", "location"])

    op.create_table(
        "station_chemicals",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("station_id", sa.String(), nullable=False),
        sa.Column("chemical_id", sa.String(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("batch_number", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["station_id"], ["bait_stations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_station_chemicals_station_id", "station_chemicals", ["station_id"])
    op.create_index("ix_station_chemicals_chemical_id", "station_chemicals", ["chemical_id"])

    for table, name_column in (("fumigation_areas", "area_name"), ("fumigation_target_pests", "pest_name")):
        op.create_table(
            table,
            sa.Column("id", sa.String(), nullable=False),
            sa.Column("report_id", sa.String(), nullable=False),
            sa.Column(name_column, sa.String(), nullable=False),
            sa.Column("is_other", sa.Boolean(), nullable=False),
            sa.Column("other_description", sa.String(), nullable=True),
            sa.ForeignKeyConstraint(["report_id"], ["reports.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(f"ix_{table}_report_id", table, ["report_id"])

    op.create_table(
        "fumigation_chemicals",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("report_id", sa.String(), nullable=False),
        sa.Column("chemical_id", sa.String(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("batch_number", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["report_id"], ["reports.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_fumigation_chemicals_report_id", "fumigation_chemicals", ["report_id"])
    op.create_index("ix_fumigation_chemicals_chemical_id", "fumigation_chemicals", ["chemical_id"])

    op.create_table(
        "insect_monitors",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("report_id", sa.String(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("monitor_number", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("monitor_type", sa.String(), nullable=False),
        sa.Column("monitor_condition", sa.String(), nullable=False),
        sa.Column("monitor_condition_other", sa.String(), nullable=True),
        sa.Column("warning_sign_condition", sa.String(), nullable=False),
        sa.Column("light_condition", sa.String(), nullable=False),
        sa.Column("light_faulty_type", sa.String(), nullable=False),
        sa.Column("light_faulty_other", sa.String(), nullable=True),
        sa.Column("glue_board_replaced", sa.Boolean(), nullable=False),
        sa.Column("tubes_replaced", sa.Boolean(), nullable=True),
        sa.Column("monitor_serviced", sa.Boolean(), nullable=False),
        sa.Column("is_new_addition", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["report_id"], ["reports.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_insect_monitors_report_id", "insect_monitors", ["report_id"])
    op.create_index("ix_insect_monitors_report_type", "insect_monitors", ["report_id", "monitor_type"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_type", "notifications", ["type"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])


def downgrade() -> None:
    for table in (
        "notifications",
        "insect_monitors",
        "fumigation_chemicals",
        "fumigation_target_pests",
        "fumigation_areas",
        "station_chemicals",
        "bait_stations",
        "reports",
        "client_pco_assignments",
        "clients",
        "users",
        "events",
    ):
        op.drop_table(table)

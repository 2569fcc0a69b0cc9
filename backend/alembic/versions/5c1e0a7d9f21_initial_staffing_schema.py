"""Initial staffing schema: resources, projects, assignments, capacity

Revision ID: 5c1e0a7d9f21
Revises:
Create Date: 2026-02-02

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5c1e0a7d9f21"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # 1) Lookup catalogs
    op.create_table(
        "statuses",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("name", name="uq_statuses_name"),
    )
    op.create_table(
        "domains",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.UniqueConstraint("name", name="uq_domains_name"),
    )

    # 2) Resources and their skills
    op.create_table(
        "resources",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("team", sa.String(), nullable=False),
        sa.Column("default_capacity", sa.Integer(), nullable=False, server_default="160"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_resources_code", "resources", ["code"], unique=True)
    op.create_index("ix_resources_name", "resources", ["name"], unique=False)
    op.create_index("ix_resources_team", "resources", ["team"], unique=False)

    op.create_table(
        "resource_skills",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("resource_id", sa.Uuid(), nullable=False),
        sa.Column("skill_name", sa.String(), nullable=False),
        sa.Column("proficiency", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_resource_skills_resource_id", "resource_skills", ["resource_id"], unique=False)
    op.create_index("ix_resource_skills_skill_name", "resource_skills", ["skill_name"], unique=False)

    # 3) Projects are owned by teams; codes are unique per team
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("priority", sa.String(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Integer(), nullable=True),
        sa.Column("domain", sa.Integer(), nullable=True),
        sa.Column("team", sa.String(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("code", "team", name="uq_projects_code_team"),
    )
    op.create_index("ix_projects_code", "projects", ["code"], unique=False)
    op.create_index("ix_projects_team", "projects", ["team"], unique=False)

    op.create_table(
        "project_skill_breakdown",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("skill_name", sa.String(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("hours", sa.Float(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
    )
    op.create_index(
        "ix_project_skill_breakdown_project_id", "project_skill_breakdown", ["project_id"], unique=False
    )

    # 4) Assignments: a concrete date, or a bare month/year
    op.create_table(
        "assignments",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("resource_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("skill_name", sa.String(), nullable=True),
        sa.Column("team", sa.String(), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("month", sa.Integer(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("hours", sa.Float(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"]),
    )
    op.create_index("ix_assignments_project_id", "assignments", ["project_id"], unique=False)
    op.create_index("ix_assignments_resource_id", "assignments", ["resource_id"], unique=False)
    op.create_index("ix_assignments_date", "assignments", ["date"], unique=False)

    # 5) Monthly capacity overrides
    op.create_table(
        "capacity",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("resource_id", sa.Uuid(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total_hours", sa.Float(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"]),
        sa.UniqueConstraint("resource_id", "month", "year", name="uq_capacity_resource_month_year"),
    )
    op.create_index("ix_capacity_resource_id", "capacity", ["resource_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_capacity_resource_id", table_name="capacity")
    op.drop_table("capacity")

    op.drop_index("ix_assignments_date", table_name="assignments")
    op.drop_index("ix_assignments_resource_id", table_name="assignments")
    op.drop_index("ix_assignments_project_id", table_name="assignments")
    op.drop_table("assignments")

    op.drop_index("ix_project_skill_breakdown_project_id", table_name="project_skill_breakdown")
    op.drop_table("project_skill_breakdown")

    op.drop_index("ix_projects_team", table_name="projects")
    op.drop_index("ix_projects_code", table_name="projects")
    op.drop_table("projects")

    op.drop_index("ix_resource_skills_skill_name", table_name="resource_skills")
    op.drop_index("ix_resource_skills_resource_id", table_name="resource_skills")
    op.drop_table("resource_skills")

    op.drop_index("ix_resources_team", table_name="resources")
    op.drop_index("ix_resources_name", table_name="resources")
    op.drop_index("ix_resources_code", table_name="resources")
    op.drop_table("resources")

    op.drop_table("domains")
    op.drop_table("statuses")

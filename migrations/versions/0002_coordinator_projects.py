"""coordinator assignments

Revision ID: 0002
Revises: 0001
Create Date: 2025-06-14
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "coordinator_projects",
        sa.Column("coordinator_project_id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(),
                  sa.ForeignKey("admins.admin_id", ondelete="CASCADE"), nullable=False),
        sa.Column("project_id", sa.Integer(),
                  sa.ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("admin_id", "project_id", name="uq_coordinator_projects_admin_project"),
    )


def downgrade():
    op.drop_table("coordinator_projects")

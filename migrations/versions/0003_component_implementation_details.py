"""per-component implementation details replace selection link/markdown

Revision ID: 0003
Revises: 0002
Create Date: 2025-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None

NOW = sa.text("CURRENT_TIMESTAMP")


def upgrade():
    op.create_table(
        "group_component_implementation_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_deliverable_selection_id", sa.Integer(),
                  sa.ForeignKey("group_deliverable_selections.group_deliverable_selection_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("group_deliverable_component_id", sa.Integer(),
                  sa.ForeignKey("group_deliverable_components.group_deliverable_component_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("markdown_description", sa.Text(), nullable=False),
        sa.Column("repository_link", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("group_deliverable_selection_id", "group_deliverable_component_id",
                            name="uq_group_component_implementation_details_pair"),
    )
    # SQLite не умеет DROP COLUMN с ограничениями: batch пересоздаёт таблицу
    with op.batch_alter_table("group_deliverable_selections") as batch:
        batch.drop_constraint("uq_group_deliverable_selections_link", type_="unique")
        batch.drop_column("link")
        batch.drop_column("markdown_text")


def downgrade():
    # старые строки получают пустой текст и ссылку по id выбора
    with op.batch_alter_table("group_deliverable_selections") as batch:
        batch.add_column(sa.Column("link", sa.String(), nullable=True))
        batch.add_column(sa.Column("markdown_text", sa.Text(), nullable=False, server_default=""))
    op.execute(
        "UPDATE group_deliverable_selections "
        "SET link = 'selection-' || group_deliverable_selection_id WHERE link IS NULL"
    )
    with op.batch_alter_table("group_deliverable_selections") as batch:
        batch.alter_column("link", existing_type=sa.String(), nullable=False)
        batch.create_unique_constraint("uq_group_deliverable_selections_link", ["link"])
    op.drop_table("group_component_implementation_details")

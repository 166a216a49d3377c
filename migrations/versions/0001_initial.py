"""initial schema

Revision ID: 0001
Revises:
Create Date: 2025-05-25
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

NOW = sa.text("CURRENT_TIMESTAMP")


def _catalog(prefix: str):
    """Поставки, компоненты и их состав: одинаково для групп и студентов."""
    op.create_table(
        f"{prefix}_deliverables",
        sa.Column(f"{prefix}_deliverable_id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(),
                  sa.ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.UniqueConstraint("project_id", "name", name=f"uq_{prefix}_deliverables_project_name"),
    )
    op.create_index(f"ix_{prefix}_deliverables_project_id", f"{prefix}_deliverables", ["project_id"])

    op.create_table(
        f"{prefix}_deliverable_components",
        sa.Column(f"{prefix}_deliverable_component_id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(),
                  sa.ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.UniqueConstraint("project_id", "name", name=f"uq_{prefix}_deliverable_components_project_name"),
    )
    op.create_index(f"ix_{prefix}_deliverable_components_project_id", f"{prefix}_deliverable_components",
                    ["project_id"])

    op.create_table(
        f"{prefix}_deliverables_components",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(f"{prefix}_deliverable_id", sa.Integer(),
                  sa.ForeignKey(f"{prefix}_deliverables.{prefix}_deliverable_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column(f"{prefix}_deliverable_component_id", sa.Integer(),
                  sa.ForeignKey(f"{prefix}_deliverable_components.{prefix}_deliverable_component_id",
                                ondelete="CASCADE"),
                  nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.UniqueConstraint(f"{prefix}_deliverable_id", f"{prefix}_deliverable_component_id",
                            name=f"uq_{prefix}_deliverables_components_pair"),
    )


def upgrade():
    # ---------- роли и аккаунты ----------
    op.create_table(
        "admin_roles",
        sa.Column("admin_role_id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
    )
    op.create_table(
        "student_roles",
        sa.Column("student_role_id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
    )
    op.create_table(
        "admins",
        sa.Column("admin_id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("admin_role_id", sa.Integer(),
                  sa.ForeignKey("admin_roles.admin_role_id", ondelete="RESTRICT"), nullable=False),
    )
    op.create_table(
        "students",
        sa.Column("student_id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("university_id", sa.Integer(), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("is_pending", sa.Boolean(), nullable=False, server_default="1"),
    )
    op.create_table(
        "blacklist",
        sa.Column("blacklist_id", sa.Integer(), primary_key=True),
        sa.Column("university_id", sa.Integer(), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("banned_at", sa.DateTime(), nullable=False),
    )

    # ---------- проекты ----------
    op.create_table(
        "projects",
        sa.Column("project_id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("max_student_uploads", sa.Integer(), nullable=False),
        sa.Column("max_group_size", sa.Integer(), nullable=False),
        sa.Column("max_groups", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("deliverable_selection_deadline", sa.DateTime(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "security_codes",
        sa.Column("security_code_id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(),
                  sa.ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_role_id", sa.Integer(),
                  sa.ForeignKey("student_roles.student_role_id", ondelete="CASCADE"), nullable=False),
        sa.Column("code", sa.String(), nullable=False, unique=True),
        sa.Column("expiration", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_security_codes_project_id", "security_codes", ["project_id"])

    # ---------- группы ----------
    op.create_table(
        "groups",
        sa.Column("group_id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(),
                  sa.ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("project_id", "name", name="uq_groups_project_name"),
    )
    op.create_index("ix_groups_project_id", "groups", ["project_id"])
    op.create_table(
        "group_members",
        sa.Column("group_member_id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(),
                  sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_id", sa.Integer(),
                  sa.ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_role_id", sa.Integer(),
                  sa.ForeignKey("student_roles.student_role_id", ondelete="CASCADE"), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("group_id", "student_id", name="uq_group_members_group_student"),
    )
    op.create_index("ix_group_members_student_id", "group_members", ["student_id"])
    op.create_table(
        "complaints",
        sa.Column("complaint_id", sa.Integer(), primary_key=True),
        sa.Column("from_group_id", sa.Integer(),
                  sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False),
        sa.Column("to_group_id", sa.Integer(),
                  sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "fairs",
        sa.Column("fair_id", sa.Integer(), primary_key=True),
        sa.Column("project_id", sa.Integer(),
                  sa.ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False),
        sa.Column("details", sa.String(), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_fairs_project_id", "fairs", ["project_id"])

    # ---------- каталоги, выбор, покупки ----------
    _catalog("group")
    op.create_table(
        "group_deliverable_selections",
        sa.Column("group_deliverable_selection_id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(),
                  sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("group_deliverable_id", sa.Integer(),
                  sa.ForeignKey("group_deliverables.group_deliverable_id", ondelete="CASCADE"), nullable=False),
        sa.Column("link", sa.String(), nullable=False),
        sa.Column("markdown_text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("link", name="uq_group_deliverable_selections_link"),
    )
    op.create_table(
        "transactions",
        sa.Column("transaction_id", sa.Integer(), primary_key=True),
        sa.Column("buyer_group_id", sa.Integer(),
                  sa.ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False),
        sa.Column("group_deliverable_selection_id", sa.Integer(),
                  sa.ForeignKey("group_deliverable_selections.group_deliverable_selection_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("fair_id", sa.Integer(),
                  sa.ForeignKey("fairs.fair_id", ondelete="CASCADE"), nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_transactions_fair_id", "transactions", ["fair_id"])

    _catalog("student")
    op.create_table(
        "student_deliverable_selections",
        sa.Column("student_deliverable_selection_id", sa.Integer(), primary_key=True),
        sa.Column("student_id", sa.Integer(),
                  sa.ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False),
        sa.Column("student_deliverable_id", sa.Integer(),
                  sa.ForeignKey("student_deliverables.student_deliverable_id", ondelete="CASCADE"),
                  nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=NOW),
        sa.UniqueConstraint("student_id", "student_deliverable_id",
                            name="uq_student_deliverable_selections_student_deliverable"),
    )
    op.create_table(
        "student_uploads",
        sa.Column("upload_id", sa.Integer(), primary_key=True),
        sa.Column("student_deliverable_selection_id", sa.Integer(),
                  sa.ForeignKey("student_deliverable_selections.student_deliverable_selection_id",
                                ondelete="CASCADE"),
                  nullable=False),
        sa.Column("path", sa.String(), nullable=False, unique=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
    )


def downgrade():
    # обратный порядок зависимостей
    for table in (
        "student_uploads", "student_deliverable_selections", "student_deliverables_components",
        "student_deliverable_components", "student_deliverables",
        "transactions", "group_deliverable_selections", "group_deliverables_components",
        "group_deliverable_components", "group_deliverables",
        "fairs", "complaints", "group_members", "groups", "security_codes", "projects",
        "blacklist", "students", "admins", "student_roles", "admin_roles",
    ):
        op.drop_table(table)

"""Create school schema

Revision ID: 001
Revises: None
Create Date: 2026-10-01 00:00:00.000000+00:00

What:  Creates the school tables (instructors, departments, subjects, students
       and their join tables) plus the identity tables (users, roles, user_roles).
How:   departments.manager_id and instructors.department_id reference each
       other, so the manager foreign key is added once both tables exist.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Instructors / Departments (mutual references) ─────────────────────
    op.create_table(
        "instructors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name_ar", sa.String(200), nullable=False),
        sa.Column("name_en", sa.String(200), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("position", sa.String(100), nullable=True),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.Column("supervisor_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_instructors"),
        sa.ForeignKeyConstraint(
            ["supervisor_id"], ["instructors.id"],
            name="fk_instructors_supervisor_id", ondelete="SET NULL",
        ),
    )
    op.create_index("ix_instructors_department_id", "instructors", ["department_id"])

    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name_ar", sa.String(500), nullable=False),
        sa.Column("name_en", sa.String(500), nullable=False),
        sa.Column("manager_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_departments"),
        sa.UniqueConstraint("name_ar", name="uq_departments_name_ar"),
        sa.UniqueConstraint("name_en", name="uq_departments_name_en"),
    )
    op.create_index("ix_departments_manager_id", "departments", ["manager_id"])

    op.create_foreign_key(
        "fk_departments_manager_id", "departments", "instructors",
        ["manager_id"], ["id"], ondelete="RESTRICT",
    )
    op.create_foreign_key(
        "fk_instructors_department_id", "instructors", "departments",
        ["department_id"], ["id"], ondelete="RESTRICT",
    )

    # ── Subjects / Students ───────────────────────────────────────────────
    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name_ar", sa.String(100), nullable=False),
        sa.Column("name_en", sa.String(100), nullable=False),
        sa.Column("period", sa.Integer(), nullable=True, comment="Course length in weeks"),
        sa.PrimaryKeyConstraint("id", name="pk_subjects"),
        sa.UniqueConstraint("name_ar", name="uq_subjects_name_ar"),
        sa.UniqueConstraint("name_en", name="uq_subjects_name_en"),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name_ar", sa.String(200), nullable=False),
        sa.Column("name_en", sa.String(200), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("phone", sa.String(500), nullable=True),
        sa.Column("department_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_students"),
        sa.UniqueConstraint("name_ar", name="uq_students_name_ar"),
        sa.UniqueConstraint("name_en", name="uq_students_name_en"),
        sa.ForeignKeyConstraint(
            ["department_id"], ["departments.id"],
            name="fk_students_department_id", ondelete="SET NULL",
        ),
    )
    op.create_index("ix_students_department_id", "students", ["department_id"])

    # ── Join tables ───────────────────────────────────────────────────────
    op.create_table(
        "department_subjects",
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("department_id", "subject_id", name="pk_department_subjects"),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], ondelete="RESTRICT"),
    )
    op.create_table(
        "instructor_subjects",
        sa.Column("instructor_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("instructor_id", "subject_id", name="pk_instructor_subjects"),
        sa.ForeignKeyConstraint(["instructor_id"], ["instructors.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], ondelete="RESTRICT"),
    )
    op.create_table(
        "student_subjects",
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.Column("grade", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("student_id", "subject_id", name="pk_student_subjects"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], ondelete="RESTRICT"),
    )

    # ── Identity ──────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_name", sa.String(256), nullable=False),
        sa.Column("normalized_user_name", sa.String(256), nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("normalized_email", sa.String(256), nullable=False),
        sa.Column("password_hash", sa.String(512), nullable=False),
        sa.Column("full_name", sa.String(256), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("phone_number", sa.String(50), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("normalized_user_name", name="uq_users_normalized_user_name"),
        sa.UniqueConstraint("normalized_email", name="uq_users_normalized_email"),
    )
    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("normalized_name", sa.String(256), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_roles"),
        sa.UniqueConstraint("normalized_name", name="uq_roles_normalized_name"),
    )
    op.create_table(
        "user_roles",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "role_id", name="pk_user_roles"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_user_roles_role_id", "user_roles", ["role_id"])


def downgrade() -> None:
    op.drop_index("ix_user_roles_role_id", table_name="user_roles")
    op.drop_table("user_roles")
    op.drop_table("roles")
    op.drop_table("users")

    op.drop_table("student_subjects")
    op.drop_table("instructor_subjects")
    op.drop_table("department_subjects")

    op.drop_index("ix_students_department_id", table_name="students")
    op.drop_table("students")
    op.drop_table("subjects")

    op.drop_constraint("fk_instructors_department_id", "instructors", type_="foreignkey")
    op.drop_constraint("fk_departments_manager_id", "departments", type_="foreignkey")
    op.drop_index("ix_departments_manager_id", table_name="departments")
    op.drop_table("departments")
    op.drop_index("ix_instructors_department_id", table_name="instructors")
    op.drop_table("instructors")

"""add_kra_tables

Revision ID: k7r1a2e3n4g5
Revises:
Create Date: 2026-10-19 09:00:00.000000

KRA 카탈로그, 직무별 KRA, KRA 평가 제출 테이블 생성.
평가 제출은 (participant_id, responsibility_kra_id) 기준 1건, version 컬럼으로 낙관적 잠금.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "k7r1a2e3n4g5"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "responsibility_kras",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("responsibility_id", UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("target_metric", sa.Text(), nullable=True),
        sa.Column("measurement_method", sa.String(30), nullable=True),
        sa.Column("weight", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_required", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("sequence_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_responsibility_kras_responsibility_id", "responsibility_kras", ["responsibility_id"])

    op.create_table(
        "job_specific_kras",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("job_responsibility_id", UUID(as_uuid=True), nullable=False),
        sa.Column("source_kra_id", UUID(as_uuid=True), sa.ForeignKey("responsibility_kras.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("job_specific_target", sa.Text(), nullable=True),
        sa.Column("measurement_method", sa.String(255), nullable=True),
        sa.Column("weight", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_inherited", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("ai_generated", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("ai_source", sa.String(255), nullable=True),
        sa.Column("sequence_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("customized_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_job_specific_kras_job_responsibility_id", "job_specific_kras", ["job_responsibility_id"])

    op.create_table(
        "kra_rating_submissions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("participant_id", UUID(as_uuid=True), nullable=False),
        sa.Column("responsibility_kra_id", UUID(as_uuid=True), sa.ForeignKey("responsibility_kras.id"), nullable=False),
        sa.Column("responsibility_id", UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", UUID(as_uuid=True), nullable=False),
        sa.Column("self_rating", sa.Integer(), nullable=True),
        sa.Column("self_comments", sa.Text(), nullable=True),
        sa.Column("self_rating_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("manager_rating", sa.Integer(), nullable=True),
        sa.Column("manager_id", UUID(as_uuid=True), nullable=True),
        sa.Column("manager_comments", sa.Text(), nullable=True),
        sa.Column("manager_rating_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("calculated_score", sa.Float(), nullable=True),
        sa.Column("final_score", sa.Float(), nullable=True),
        sa.Column("weight_adjusted_score", sa.Float(), nullable=True),
        sa.Column("status", sa.String(20), server_default="not_rated", nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("participant_id", "responsibility_kra_id", name="uq_kra_rating_participant_kra"),
    )
    op.create_index("ix_kra_rating_submissions_participant_id", "kra_rating_submissions", ["participant_id"])
    op.create_index("ix_kra_rating_submissions_responsibility_id", "kra_rating_submissions", ["responsibility_id"])


def downgrade() -> None:
    op.drop_index("ix_kra_rating_submissions_responsibility_id")
    op.drop_index("ix_kra_rating_submissions_participant_id")
    op.drop_table("kra_rating_submissions")
    op.drop_index("ix_job_specific_kras_job_responsibility_id")
    op.drop_table("job_specific_kras")
    op.drop_index("ix_responsibility_kras_responsibility_id")
    op.drop_table("responsibility_kras")

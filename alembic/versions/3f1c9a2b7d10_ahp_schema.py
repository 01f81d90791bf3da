"""ahp schema

Revision ID: 3f1c9a2b7d10
Revises: 
Create Date: 2026-10-19 10:12:44.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'criteria',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('weight', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_criteria_id', 'criteria', ['id'])

    op.create_table(
        'criteria_comparisons',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('criteria1_id', sa.Integer(), sa.ForeignKey('criteria.id', ondelete='CASCADE'), nullable=False),
        sa.Column('criteria2_id', sa.Integer(), sa.ForeignKey('criteria.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('criteria1_id', 'criteria2_id', name='uq_criteria_pair'),
    )
    op.create_index('ix_criteria_comparisons_id', 'criteria_comparisons', ['id'])

    op.create_table(
        'weight_calculations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('weights', sa.JSON(), nullable=False),
        sa.Column('lambda_max', sa.Float(), nullable=False),
        sa.Column('consistency_index', sa.Float(), nullable=False),
        sa.Column('consistency_ratio', sa.Float(), nullable=False),
        sa.Column('is_consistent', sa.Boolean(), nullable=False),
        sa.Column('decision', sa.String(), nullable=False),
        sa.Column('applied', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('superseded', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('actor', sa.String(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_weight_calculations_id', 'weight_calculations', ['id'])

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('class', sa.String(), nullable=False),
        sa.Column('nis', sa.String(), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_students_id', 'students', ['id'])

    op.create_table(
        'student_scores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('criteria_id', sa.Integer(), sa.ForeignKey('criteria.id', ondelete='CASCADE'), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.UniqueConstraint('student_id', 'criteria_id', name='uq_student_criteria'),
    )
    op.create_index('ix_student_scores_id', 'student_scores', ['id'])

    op.create_table(
        'ahp_results',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('final_score', sa.Float(), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_ahp_results_id', 'ahp_results', ['id'])
    op.create_index('ix_ahp_results_rank', 'ahp_results', ['rank'])


def downgrade() -> None:
    op.drop_table('ahp_results')
    op.drop_table('student_scores')
    op.drop_table('students')
    op.drop_table('weight_calculations')
    op.drop_table('criteria_comparisons')
    op.drop_table('criteria')

"""Initial schema - thesis tracker

Revision ID: 0001
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Accounts table
    op.create_table(
        'accounts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('middle_name', sa.String(100), nullable=True),
        sa.Column('role', sa.String(50), nullable=False, default='student'),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('grade', sa.Float(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Theses table
    op.create_table(
        'theses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('authors', sa.JSON(), nullable=False),
        sa.Column('advisers', sa.JSON(), nullable=False),
        sa.Column('panelists', sa.JSON(), nullable=False),
        sa.Column('phase', sa.Integer(), nullable=False, default=1),
        sa.Column('status', sa.String(50), nullable=False, default='new'),
        sa.Column('approved', sa.Boolean(), nullable=True),
        sa.Column('locked', sa.Boolean(), nullable=False, default=False),
        sa.Column('inactive', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_theses_status_phase', 'theses', ['status', 'phase'])

    # Thesis grade history
    op.create_table(
        'thesis_grades',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('thesis_id', sa.Uuid(), sa.ForeignKey('theses.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('graded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('value', sa.Float(), nullable=True),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('graded_by', sa.Uuid(), sa.ForeignKey('accounts.id', ondelete='SET NULL'), nullable=True),
    )

    # Submissions and attachments
    op.create_table(
        'submissions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('thesis_id', sa.Uuid(), sa.ForeignKey('theses.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('submitter_id', sa.Uuid(), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('phase', sa.Integer(), nullable=False),
        sa.Column('submitted', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_submissions_thesis_submitted', 'submissions', ['thesis_id', 'submitted'])

    op.create_table(
        'attachments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('submission_id', sa.Uuid(), sa.ForeignKey('submissions.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer(), nullable=False, default=0),
        sa.Column('original_name', sa.String(255), nullable=False),
        sa.Column('mime', sa.String(255), nullable=False, default='application/octet-stream'),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('data', sa.LargeBinary(), nullable=False),
    )

    # Submission deadlines
    op.create_table(
        'submission_deadlines',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('phase', sa.Integer(), nullable=False, index=True),
        sa.Column('subphase', sa.Integer(), nullable=False, default=0),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('phase', 'subphase', name='uq_submission_deadlines_phase_subphase'),
    )

    # Comments
    op.create_table(
        'comments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('thesis_id', sa.Uuid(), sa.ForeignKey('theses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('accounts.id'), nullable=False, index=True),
        sa.Column('phase', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('sent', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_comments_thesis_sent', 'comments', ['thesis_id', 'sent'])

    # Event logs table (append-only)
    op.create_table(
        'event_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False, index=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('account_id', sa.Uuid(), nullable=True, index=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )
    op.create_index('ix_event_logs_entity', 'event_logs', ['entity_type', 'entity_id'])
    op.create_index('ix_event_logs_type_time', 'event_logs', ['event_type', 'created_at'])


def downgrade() -> None:
    op.drop_table('event_logs')
    op.drop_table('comments')
    op.drop_table('submission_deadlines')
    op.drop_table('attachments')
    op.drop_table('submissions')
    op.drop_table('thesis_grades')
    op.drop_table('theses')
    op.drop_table('accounts')

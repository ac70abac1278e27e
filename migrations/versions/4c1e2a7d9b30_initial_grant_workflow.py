"""initial grant workflow

Revision ID: 4c1e2a7d9b30
Revises: None
Create Date: 2026-10-19 10:12:44.181920

"""

# revision identifiers, used by Alembic.
revision = '4c1e2a7d9b30'
down_revision = None

from alembic import op
import sqlalchemy as sa


def status_enum(name, *values):
    return sa.Enum(*values, name=name, native_enum=False, create_constraint=True)


def upgrade():
    op.create_table('user',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('email', sa.String(), nullable=False),
    sa.Column('full_name', sa.String(), nullable=False),
    sa.Column('role', status_enum('user_role', 'researcher', 'reviewer', 'coordinator', 'director', 'vice_president'), nullable=False),
    sa.Column('department', sa.String(), nullable=True),
    sa.Column('password_hash', sa.String(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_user'))
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)
    op.create_index(op.f('ix_user_full_name'), 'user', ['full_name'], unique=False)
    op.create_index('ix_user_email_lower', 'user', [sa.text('lower(email)')], unique=True)

    op.create_table('call_for_papers',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('title', sa.String(), nullable=False),
    sa.Column('description', sa.String(), nullable=False),
    sa.Column('deadline', sa.DateTime(), nullable=False),
    sa.Column('status', status_enum('call_status', 'open', 'closed'), nullable=False),
    sa.Column('created_by', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['created_by'], ['user.id'], name=op.f('fk_call_for_papers_created_by_user')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_call_for_papers'))
    )

    op.create_table('proposal',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('call_id', sa.Integer(), nullable=False),
    sa.Column('researcher_id', sa.Integer(), nullable=False),
    sa.Column('title', sa.String(), nullable=False),
    sa.Column('abstract', sa.String(), nullable=False),
    sa.Column('methodology', sa.String(), nullable=False),
    sa.Column('budget_amount', sa.Numeric(precision=12, scale=2), nullable=False),
    sa.Column('status', status_enum('proposal_status', 'submitted', 'under_review', 'approved', 'rejected', 'budget_requested', 'budget_approved'), nullable=False),
    sa.Column('submitted_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint('budget_amount >= 0', name=op.f('ck_proposal_budget_amount_non_negative')),
    sa.ForeignKeyConstraint(['call_id'], ['call_for_papers.id'], name=op.f('fk_proposal_call_id_call_for_papers')),
    sa.ForeignKeyConstraint(['researcher_id'], ['user.id'], name=op.f('fk_proposal_researcher_id_user')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_proposal'))
    )
    op.create_index(op.f('ix_proposal_call_id'), 'proposal', ['call_id'], unique=False)
    op.create_index(op.f('ix_proposal_researcher_id'), 'proposal', ['researcher_id'], unique=False)

    op.create_table('proposal_reviewer',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('proposal_id', sa.Integer(), nullable=False),
    sa.Column('reviewer_id', sa.Integer(), nullable=False),
    sa.Column('assigned_by', sa.Integer(), nullable=False),
    sa.Column('assigned_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['assigned_by'], ['user.id'], name=op.f('fk_proposal_reviewer_assigned_by_user')),
    sa.ForeignKeyConstraint(['proposal_id'], ['proposal.id'], name=op.f('fk_proposal_reviewer_proposal_id_proposal')),
    sa.ForeignKeyConstraint(['reviewer_id'], ['user.id'], name=op.f('fk_proposal_reviewer_reviewer_id_user')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_proposal_reviewer')),
    sa.UniqueConstraint('proposal_id', 'reviewer_id', name=op.f('uq_proposal_reviewer_proposal_id'))
    )
    op.create_index(op.f('ix_proposal_reviewer_proposal_id'), 'proposal_reviewer', ['proposal_id'], unique=False)
    op.create_index(op.f('ix_proposal_reviewer_reviewer_id'), 'proposal_reviewer', ['reviewer_id'], unique=False)

    op.create_table('review',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('proposal_id', sa.Integer(), nullable=False),
    sa.Column('reviewer_id', sa.Integer(), nullable=False),
    sa.Column('score', sa.Integer(), nullable=False),
    sa.Column('recommendation', status_enum('recommendation', 'approve', 'reject', 'revise'), nullable=False),
    sa.Column('comments', sa.String(), nullable=False),
    sa.Column('submitted_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint('score >= 0 AND score <= 100', name=op.f('ck_review_score_range')),
    sa.ForeignKeyConstraint(['proposal_id'], ['proposal.id'], name=op.f('fk_review_proposal_id_proposal')),
    sa.ForeignKeyConstraint(['reviewer_id'], ['user.id'], name=op.f('fk_review_reviewer_id_user')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_review')),
    sa.UniqueConstraint('proposal_id', 'reviewer_id', name=op.f('uq_review_proposal_id'))
    )
    op.create_index(op.f('ix_review_proposal_id'), 'review', ['proposal_id'], unique=False)
    op.create_index(op.f('ix_review_reviewer_id'), 'review', ['reviewer_id'], unique=False)

    op.create_table('budget_request',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('proposal_id', sa.Integer(), nullable=False),
    sa.Column('requested_amount', sa.Numeric(precision=12, scale=2), nullable=False),
    sa.Column('justification', sa.String(), nullable=False),
    sa.Column('status', status_enum('budget_status', 'pending', 'approved', 'rejected'), nullable=False),
    sa.Column('requested_by', sa.Integer(), nullable=False),
    sa.Column('approved_by', sa.Integer(), nullable=True),
    sa.Column('requested_at', sa.DateTime(), nullable=False),
    sa.Column('reviewed_at', sa.DateTime(), nullable=True),
    sa.CheckConstraint('requested_amount >= 0', name=op.f('ck_budget_request_requested_amount_non_negative')),
    sa.ForeignKeyConstraint(['approved_by'], ['user.id'], name=op.f('fk_budget_request_approved_by_user')),
    sa.ForeignKeyConstraint(['proposal_id'], ['proposal.id'], name=op.f('fk_budget_request_proposal_id_proposal')),
    sa.ForeignKeyConstraint(['requested_by'], ['user.id'], name=op.f('fk_budget_request_requested_by_user')),
    sa.PrimaryKeyConstraint('id', name=op.f('pk_budget_request'))
    )
    op.create_index(op.f('ix_budget_request_proposal_id'), 'budget_request', ['proposal_id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_budget_request_proposal_id'), table_name='budget_request')
    op.drop_table('budget_request')
    op.drop_index(op.f('ix_review_reviewer_id'), table_name='review')
    op.drop_index(op.f('ix_review_proposal_id'), table_name='review')
    op.drop_table('review')
    op.drop_index(op.f('ix_proposal_reviewer_reviewer_id'), table_name='proposal_reviewer')
    op.drop_index(op.f('ix_proposal_reviewer_proposal_id'), table_name='proposal_reviewer')
    op.drop_table('proposal_reviewer')
    op.drop_index(op.f('ix_proposal_researcher_id'), table_name='proposal')
    op.drop_index(op.f('ix_proposal_call_id'), table_name='proposal')
    op.drop_table('proposal')
    op.drop_table('call_for_papers')
    op.drop_index('ix_user_email_lower', table_name='user')
    op.drop_index(op.f('ix_user_full_name'), table_name='user')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')

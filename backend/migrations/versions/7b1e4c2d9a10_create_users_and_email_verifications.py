"""create users and email verifications

Revision ID: 7b1e4c2d9a10
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7b1e4c2d9a10'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('user', 'admin', name='enum_user_role', create_constraint=True)


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('verification_token', sa.String(length=64), nullable=True),
        sa.Column('login_attempts', sa.Integer(), nullable=False),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=False)

    op.create_table(
        'email_verifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_used', sa.Boolean(), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('length(code) = 6', name=op.f('ck_email_verifications_code_length')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_email_verifications')),
    )
    op.create_index('ix_email_verifications_email_code', 'email_verifications', ['email', 'code'], unique=False)
    op.create_index(
        'ix_email_verifications_email_used_expires',
        'email_verifications',
        ['email', 'is_used', 'expires_at'],
        unique=False,
    )
    op.create_index('ix_email_verifications_email', 'email_verifications', ['email'], unique=False)
    op.create_index('ix_email_verifications_expires_at', 'email_verifications', ['expires_at'], unique=False)


def downgrade():
    op.drop_index('ix_email_verifications_expires_at', table_name='email_verifications')
    op.drop_index('ix_email_verifications_email', table_name='email_verifications')
    op.drop_index('ix_email_verifications_email_used_expires', table_name='email_verifications')
    op.drop_index('ix_email_verifications_email_code', table_name='email_verifications')
    op.drop_table('email_verifications')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    user_role.drop(op.get_bind(), checkfirst=True)

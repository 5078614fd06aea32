"""
initial objective / evaluation lifecycle tables

Revision ID: 20250101_initial_lifecycle_tables
Revises:
Create Date: 2025-01-01
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20250101_initial_lifecycle_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', sa.Enum('employee', 'coach', 'admin', name='userrole'), nullable=False),
        sa.Column('department', sa.String(), nullable=True),
        sa.Column('coach_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['coach_id'], ['users.id'], ),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_coach_id', 'users', ['coach_id'])

    op.create_table(
        'skills',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('theme_name', sa.String(), nullable=True),
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('client_name', sa.String(), nullable=True),
        sa.Column('status', sa.Enum('draft', 'in_progress', 'on_hold', 'finished', 'cancelled', name='projectstatus'), nullable=False),
        sa.Column('author_id', sa.String(), nullable=True),
        sa.Column('referent_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['referent_id'], ['users.id'], ),
    )
    op.create_index('ix_projects_referent_id', 'projects', ['referent_id'])

    op.create_table(
        'project_assignments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('project_id', sa.String(), nullable=False),
        sa.Column('employee_id', sa.String(), nullable=False),
        sa.Column('role_on_project', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ),
        sa.ForeignKeyConstraint(['employee_id'], ['users.id'], ),
        sa.UniqueConstraint('project_id', 'employee_id', name='uq_assignment_project_employee'),
    )
    op.create_index('ix_project_assignments_project_id', 'project_assignments', ['project_id'])
    op.create_index('ix_project_assignments_employee_id', 'project_assignments', ['employee_id'])

    op.create_table(
        'objective_sets',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('assignment_id', sa.String(), nullable=False),
        sa.Column('objectives', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['assignment_id'], ['project_assignments.id'], ),
        sa.UniqueConstraint('assignment_id'),
    )

    op.create_table(
        'evaluations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('objective_set_id', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('self_entries', sa.JSON(), nullable=False),
        sa.Column('self_submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('referent_entries', sa.JSON(), nullable=True),
        sa.Column('referent_submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('referent_id', sa.String(), nullable=True),
        sa.Column('closed_by', sa.String(), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['objective_set_id'], ['objective_sets.id'], ),
        sa.ForeignKeyConstraint(['referent_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['closed_by'], ['users.id'], ),
        sa.UniqueConstraint('objective_set_id'),
    )
    op.create_index('ix_evaluations_status', 'evaluations', ['status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('recipient_id', sa.String(), nullable=False),
        sa.Column('sender_id', sa.String(), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('kind', sa.String(), nullable=False),
        sa.Column('priority', sa.Integer(), nullable=False),
        sa.Column('link', sa.String(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ),
    )
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])


def downgrade() -> None:
    op.drop_index('ix_notifications_recipient_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_evaluations_status', table_name='evaluations')
    op.drop_table('evaluations')
    op.drop_table('objective_sets')
    op.drop_index('ix_project_assignments_employee_id', table_name='project_assignments')
    op.drop_index('ix_project_assignments_project_id', table_name='project_assignments')
    op.drop_table('project_assignments')
    op.drop_index('ix_projects_referent_id', table_name='projects')
    op.drop_table('projects')
    op.drop_table('skills')
    op.drop_index('ix_users_coach_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
    sa.Enum(name='projectstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='userrole').drop(op.get_bind(), checkfirst=True)

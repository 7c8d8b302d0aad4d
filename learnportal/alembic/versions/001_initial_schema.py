"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_ATTEMPT_WHERE = "completed_at IS NULL AND deleted_at IS NULL"


def upgrade():
    # Create topics table
    op.create_table(
        'topics',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('level', sa.String(20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_topics')
    )

    # Create exams table
    op.create_table(
        'exams',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('passing_score_percentage', sa.Integer(), nullable=False),
        sa.Column('topic_id', sa.String(36), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_exams'),
        sa.ForeignKeyConstraint(['topic_id'], ['topics.id'], name='fk_exams_topic_id_topics'),
        sa.CheckConstraint('duration_minutes BETWEEN 1 AND 480', name='ck_exams_duration_range'),
        sa.CheckConstraint('passing_score_percentage BETWEEN 0 AND 100', name='ck_exams_passing_score_range')
    )
    op.create_index('ix_exams_topic_id', 'exams', ['topic_id'])

    # Create questions table
    op.create_table(
        'questions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('question_type', sa.String(32), nullable=False),
        sa.Column('exam_id', sa.String(36), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('correct_option', sa.Integer(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_questions'),
        sa.ForeignKeyConstraint(['exam_id'], ['exams.id'], name='fk_questions_exam_id_exams'),
        sa.CheckConstraint('points >= 1', name='ck_questions_points_positive'),
        sa.CheckConstraint('correct_option >= 0', name='ck_questions_correct_option_non_negative')
    )
    op.create_index('ix_questions_exam_id', 'questions', ['exam_id'])

    # Create question_topics association table
    op.create_table(
        'question_topics',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('question_id', sa.String(36), nullable=False),
        sa.Column('topic_id', sa.String(36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_question_topics'),
        sa.ForeignKeyConstraint(['question_id'], ['questions.id'], name='fk_question_topics_question_id_questions'),
        sa.ForeignKeyConstraint(['topic_id'], ['topics.id'], name='fk_question_topics_topic_id_topics'),
        sa.UniqueConstraint('question_id', 'topic_id', name='uq_question_topics_question_topic')
    )
    op.create_index('ix_question_topics_question_id', 'question_topics', ['question_id'])
    op.create_index('ix_question_topics_topic_id', 'question_topics', ['topic_id'])

    # Create exam_assignments table
    op.create_table(
        'exam_assignments',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('exam_id', sa.String(36), nullable=False),
        sa.Column('assigned_by', sa.String(36), nullable=False),
        sa.Column('assigned_at', sa.DateTime(), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_exam_assignments'),
        sa.ForeignKeyConstraint(['exam_id'], ['exams.id'], name='fk_exam_assignments_exam_id_exams')
    )
    op.create_index('ix_exam_assignments_user_id', 'exam_assignments', ['user_id'])
    op.create_index('ix_exam_assignments_exam_id', 'exam_assignments', ['exam_id'])

    # Create exam_attempts table
    op.create_table(
        'exam_attempts',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('exam_id', sa.String(36), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('passed', sa.Boolean(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_exam_attempts'),
        sa.ForeignKeyConstraint(['exam_id'], ['exams.id'], name='fk_exam_attempts_exam_id_exams')
    )
    op.create_index('ix_exam_attempts_user_id', 'exam_attempts', ['user_id'])
    op.create_index('ix_exam_attempts_exam_id', 'exam_attempts', ['exam_id'])
    # At most one in-progress attempt per user and exam
    op.create_index(
        'uq_exam_attempts_active_user_exam',
        'exam_attempts',
        ['user_id', 'exam_id'],
        unique=True,
        sqlite_where=sa.text(ACTIVE_ATTEMPT_WHERE),
        postgresql_where=sa.text(ACTIVE_ATTEMPT_WHERE)
    )


def downgrade():
    op.drop_table('exam_attempts')
    op.drop_table('exam_assignments')
    op.drop_table('question_topics')
    op.drop_table('questions')
    op.drop_table('exams')
    op.drop_table('topics')

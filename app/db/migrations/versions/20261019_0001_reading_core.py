"""Reading core schema: users, books, statuses, sessions, history and goals.

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False, server_default=sa.text('gen_random_uuid()'))


def _user_fk() -> sa.Column:
    return sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)


def _book_fk() -> sa.Column:
    return sa.Column('book_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False)


def upgrade() -> None:
    # Users
    op.create_table(
        'users',
        _uuid_pk(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=False),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('profession', sa.String(100), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_profession', 'users', ['profession'])

    op.create_table(
        'friendships',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('friend_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('user_id', 'friend_id'),
        sa.CheckConstraint('user_id <> friend_id', name='check_friendship_not_self'),
    )
    op.create_index('idx_friendships_friend_id', 'friendships', ['friend_id'])

    # Catalogue
    op.create_table(
        'genres',
        _uuid_pk(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'books',
        _uuid_pk(),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('author', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('language', sa.String(10), nullable=False, server_default='en'),
        sa.Column('isbn', sa.String(20), nullable=True),
        sa.Column('published_year', sa.Integer(), nullable=True),
        sa.Column('page_count', sa.Integer(), nullable=True),
        sa.Column('cover_url', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('page_count IS NULL OR page_count >= 0', name='check_book_page_count'),
    )
    op.create_index('ix_books_title', 'books', ['title'])
    op.create_index('idx_books_created_at', 'books', ['created_at'])

    op.create_table(
        'book_genres',
        sa.Column('book_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('genre_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('genres.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('book_id', 'genre_id'),
    )
    op.create_index('idx_book_genres_genre_id', 'book_genres', ['genre_id'])

    op.create_table(
        'user_genre_preferences',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('genre_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('genres.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('user_id', 'genre_id'),
    )
    op.create_index('idx_user_genre_preferences_genre_id', 'user_genre_preferences', ['genre_id'])

    # Ratings, reviews and favorites
    op.create_table(
        'ratings',
        _uuid_pk(),
        _book_fk(),
        _user_fk(),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('rated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('book_id', 'user_id', name='uq_rating_book_user'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='check_rating_value'),
    )
    op.create_index('idx_ratings_book_id', 'ratings', ['book_id'])
    op.create_index('idx_ratings_user_id', 'ratings', ['user_id'])

    op.create_table(
        'reviews',
        _uuid_pk(),
        _book_fk(),
        _user_fk(),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('book_id', 'user_id', name='uq_review_book_user'),
    )
    op.create_index('idx_reviews_book_id', 'reviews', ['book_id'])

    op.create_table(
        'favorites',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('user_id', 'book_id'),
    )
    op.create_index('idx_favorites_user_id', 'favorites', ['user_id'])

    # Reading statuses
    op.create_table(
        'reading_statuses',
        _uuid_pk(),
        _user_fk(),
        _book_fk(),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('current_page', sa.Integer(), nullable=True),
        sa.Column('percent_complete', sa.Float(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'book_id', name='uq_reading_status_user_book'),
        sa.CheckConstraint("status IN ('want-to-read', 'reading', 'finished')", name='check_reading_status_value'),
        sa.CheckConstraint(
            'percent_complete IS NULL OR (percent_complete >= 0 AND percent_complete <= 100)',
            name='check_reading_status_percent_range',
        ),
    )
    op.create_index('idx_reading_statuses_user_status', 'reading_statuses', ['user_id', 'status'])
    op.create_index('idx_reading_statuses_book_id', 'reading_statuses', ['book_id'])

    # Reading sessions
    op.create_table(
        'reading_sessions',
        _uuid_pk(),
        _user_fk(),
        _book_fk(),
        sa.Column('start_page', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_page', sa.Integer(), nullable=True),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('pages_read', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('start_page >= 1', name='check_session_start_page_positive'),
    )
    # At most one active session per user per book
    op.create_index(
        'uq_reading_sessions_active_user_book',
        'reading_sessions',
        ['user_id', 'book_id'],
        unique=True,
        postgresql_where=sa.text('is_active'),
    )
    op.create_index('idx_reading_sessions_user_book', 'reading_sessions', ['user_id', 'book_id', 'end_time'])
    op.create_index('idx_reading_sessions_book_id', 'reading_sessions', ['book_id'])

    # Reading history
    op.create_table(
        'history_entries',
        _uuid_pk(),
        _user_fk(),
        _book_fk(),
        sa.Column('action', sa.String(30), nullable=False),
        sa.Column('context', sa.String(20), nullable=False, server_default='app'),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('payload', sa.JSON(), nullable=False, server_default='{}'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "action IN ('started', 'finished', 'want-to-read', 'reviewed', 'progress-update')",
            name='check_history_action',
        ),
    )
    op.create_index('idx_history_entries_user_timestamp', 'history_entries', ['user_id', 'timestamp'])
    op.create_index('idx_history_entries_user_action', 'history_entries', ['user_id', 'action'])

    # Reading goals
    op.create_table(
        'reading_goals',
        _uuid_pk(),
        _user_fk(),
        sa.Column('period', sa.String(20), nullable=False),
        sa.Column('target', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('progress', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "period IN ('weekly', 'monthly', 'quarterly', 'biannual', 'annual')",
            name='check_goal_period',
        ),
        sa.CheckConstraint("status IN ('active', 'completed', 'cancelled')", name='check_goal_status'),
        sa.CheckConstraint('target >= 1', name='check_goal_target_positive'),
        sa.CheckConstraint('end_date >= start_date', name='check_goal_date_range'),
    )
    # At most one active goal per user per period
    op.create_index(
        'uq_reading_goals_active_user_period',
        'reading_goals',
        ['user_id', 'period'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )
    op.create_index('idx_reading_goals_user_start', 'reading_goals', ['user_id', 'start_date'])


def downgrade() -> None:
    op.drop_table('reading_goals')
    op.drop_table('history_entries')
    op.drop_table('reading_sessions')
    op.drop_table('reading_statuses')
    op.drop_table('favorites')
    op.drop_table('reviews')
    op.drop_table('ratings')
    op.drop_table('user_genre_preferences')
    op.drop_table('book_genres')
    op.drop_table('books')
    op.drop_table('genres')
    op.drop_table('friendships')
    op.drop_table('users')

"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Enums are stored as plain strings (native_enum=False) so both SQLite and
    # Postgres share one schema
    op.create_table(
        "channels",
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column("tenant_id", sa.String(100), nullable=False),
        sa.Column("handle", sa.String(255), nullable=False),
        sa.Column("platform", sa.String(20), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("follower_count", sa.Integer(), nullable=True),
        sa.Column("posts_count", sa.Integer(), nullable=True),
        sa.Column("follows_count", sa.Integer(), nullable=True),
        sa.Column("thumbnail_url", sa.String(2048), nullable=True),
        sa.Column("biography", sa.Text(), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("external_urls", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("initial_scrape_running", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_channels_tenant_id", "channels", ["tenant_id"])
    op.create_index("ix_channels_handle", "channels", ["handle"])
    op.create_index("ix_channels_platform", "channels", ["platform"])
    op.create_index("ix_channels_created_at", "channels", ["created_at"])

    op.create_table(
        "content_items",
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column(
            "channel_id",
            sa.String(100),
            sa.ForeignKey("channels.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("platform", sa.String(20), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        sa.Column("last_synced_at", sa.DateTime(), nullable=False),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("media_url", sa.String(2048), nullable=True),
        sa.Column("display_url", sa.String(2048), nullable=True),
        sa.Column("local_image_path", sa.String(1024), nullable=True),
        sa.Column("transcription", sa.Text(), nullable=True),
        sa.Column("transcription_status", sa.String(20), nullable=False),
        sa.Column("raw", sa.JSON(), nullable=False),
    )
    op.create_index("ix_content_items_channel_id", "content_items", ["channel_id"])
    op.create_index("ix_content_items_platform", "content_items", ["platform"])
    op.create_index("ix_content_items_published_at", "content_items", ["published_at"])

    op.create_table(
        "topics",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_topics_name", "topics", ["name"], unique=True)
    op.create_index("ix_topics_created_at", "topics", ["created_at"])

    op.create_table(
        "item_topics",
        sa.Column(
            "item_id",
            sa.String(100),
            sa.ForeignKey("content_items.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "topic_id",
            sa.Integer(),
            sa.ForeignKey("topics.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("source", sa.String(10), primary_key=True),
    )
    op.create_index("ix_item_topics_topic_id", "item_topics", ["topic_id"])

    op.create_table(
        "sync_jobs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("handle", sa.String(255), nullable=False),
        sa.Column("platform", sa.String(20), nullable=False),
        sa.Column("tenant_id", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("lookback_days", sa.Integer(), nullable=True),
        sa.Column("is_initial_scrape", sa.Boolean(), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("channel_id", sa.String(100), nullable=True),
        sa.Column("channel_title", sa.String(500), nullable=True),
        sa.Column("items_found", sa.Integer(), nullable=False),
        sa.Column("items_processed", sa.Integer(), nullable=False),
        sa.Column("new_items", sa.Integer(), nullable=False),
        sa.Column("updated_items", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_sync_jobs_tenant_id", "sync_jobs", ["tenant_id"])
    op.create_index("ix_sync_jobs_status", "sync_jobs", ["status"])
    op.create_index("ix_sync_jobs_created_at", "sync_jobs", ["created_at"])

    op.create_table(
        "suggested_channels",
        sa.Column("id", sa.String(100), primary_key=True),
        sa.Column("tenant_id", sa.String(100), primary_key=True),
        sa.Column("platform", sa.String(20), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(500), nullable=True),
        sa.Column("follower_count", sa.Integer(), nullable=True),
        sa.Column("follows_count", sa.Integer(), nullable=True),
        sa.Column("posts_count", sa.Integer(), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("biography", sa.Text(), nullable=True),
        sa.Column("external_url", sa.String(2048), nullable=True),
        sa.Column("profile_pic_url", sa.String(2048), nullable=True),
        sa.Column("search_term", sa.String(500), nullable=False),
        sa.Column(
            "category_topic_id",
            sa.Integer(),
            sa.ForeignKey("topics.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("found_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_suggested_channels_username", "suggested_channels", ["username"])
    op.create_index("ix_suggested_channels_found_at", "suggested_channels", ["found_at"])

    op.create_table(
        "searched_topics",
        sa.Column("tenant_id", sa.String(100), primary_key=True),
        sa.Column(
            "topic_id",
            sa.Integer(),
            sa.ForeignKey("topics.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("searched_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "topic_graph_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.String(100), nullable=False),
        sa.Column("params_json", sa.JSON(), nullable=False),
        sa.Column("graph_json", sa.Text(), nullable=False),
        sa.Column("node_count", sa.Integer(), nullable=False),
        sa.Column("edge_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_topic_graph_snapshots_tenant_id", "topic_graph_snapshots", ["tenant_id"])
    op.create_index(
        "ix_topic_graph_snapshots_created_at", "topic_graph_snapshots", ["created_at"]
    )


def downgrade() -> None:
    op.drop_table("topic_graph_snapshots")
    op.drop_table("searched_topics")
    op.drop_table("suggested_channels")
    op.drop_table("sync_jobs")
    op.drop_table("item_topics")
    op.drop_table("topics")
    op.drop_table("content_items")
    op.drop_table("channels")

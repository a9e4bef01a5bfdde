"""Create users, categories, posts and comments tables.

Revision ID: 20260301_01
Revises:
Create Date: 2026-03-01 00:00:00
"""

# pylint: disable=invalid-name,missing-module-docstring

from __future__ import annotations

import sqlalchemy as sa
from fastapi_users_db_sqlalchemy.generics import GUID

from alembic import op

# revision identifiers, used by Alembic.
revision = "20260301_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create the blog schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table("users"):
        op.create_table(
            "users",
            sa.Column("id", GUID(), nullable=False),
            sa.Column("email", sa.String(length=320), nullable=False),
            sa.Column("hashed_password", sa.String(length=1024), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False),
            sa.Column("is_superuser", sa.Boolean(), nullable=False),
            sa.Column("is_verified", sa.Boolean(), nullable=False),
            sa.Column("name", sa.String(length=60), nullable=False),
            sa.Column("role", sa.String(length=10), nullable=False, server_default="user"),
            sa.Column("bio", sa.String(length=300), nullable=True),
            sa.Column("avatar", sa.String(length=500), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    if not inspector.has_table("categories"):
        op.create_table(
            "categories",
            sa.Column("id", GUID(), nullable=False),
            sa.Column("name", sa.String(length=50), nullable=False),
            sa.Column("slug", sa.String(length=200), nullable=False),
            sa.Column("description", sa.String(length=200), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(
            op.f("ix_categories_slug"), "categories", ["slug"], unique=True
        )
        op.create_index(
            op.f("ix_categories_is_active"), "categories", ["is_active"], unique=False
        )

    if not inspector.has_table("posts"):
        op.create_table(
            "posts",
            sa.Column("id", GUID(), nullable=False),
            sa.Column("title", sa.String(length=100), nullable=False),
            sa.Column("slug", sa.String(length=200), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("excerpt", sa.String(length=200), nullable=True),
            sa.Column("featured_image", sa.String(length=500), nullable=False),
            sa.Column("author_id", GUID(), nullable=False),
            sa.Column("category_id", GUID(), nullable=False),
            sa.Column("tags", sa.JSON(), nullable=False),
            sa.Column(
                "is_published", sa.Boolean(), nullable=False, server_default="0"
            ),
            sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
            sa.ForeignKeyConstraint(["category_id"], ["categories.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_posts_slug"), "posts", ["slug"], unique=True)
        op.create_index(op.f("ix_posts_author_id"), "posts", ["author_id"])
        op.create_index(op.f("ix_posts_category_id"), "posts", ["category_id"])
        op.create_index(op.f("ix_posts_is_published"), "posts", ["is_published"])
        op.create_index(op.f("ix_posts_created_at"), "posts", ["created_at"])

    if not inspector.has_table("comments"):
        op.create_table(
            "comments",
            sa.Column("id", GUID(), nullable=False),
            sa.Column("post_id", GUID(), nullable=False),
            sa.Column("user_id", GUID(), nullable=True),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_comments_post_id"), "comments", ["post_id"])


def downgrade():
    """Drop the blog schema."""
    op.drop_index(op.f("ix_comments_post_id"), table_name="comments")
    op.drop_table("comments")
    for name in ("created_at", "is_published", "category_id", "author_id", "slug"):
        op.drop_index(op.f(f"ix_posts_{name}"), table_name="posts")
    op.drop_table("posts")
    op.drop_index(op.f("ix_categories_is_active"), table_name="categories")
    op.drop_index(op.f("ix_categories_slug"), table_name="categories")
    op.drop_table("categories")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")

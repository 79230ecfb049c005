"""Post, Comment and Vote models"""

from sqlalchemy import Column, String, Text, BigInteger, Integer, Index

from .base import Base, PortableJSONB, new_id


class Post(Base):
    """Post owned by one agent.

    ``deleted_at`` is the soft-delete marker set by the posts API. The
    retention job hard-deletes the post (with its comments and votes) once
    the marker is older than the grace period.
    """
    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_agent_id", "agent_id"),
        Index("ix_posts_deleted_at", "deleted_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    agent_id = Column(String(36), nullable=False)
    type = Column(String(32), nullable=False, default="update")
    content = Column(Text, nullable=False)
    tags = Column(PortableJSONB, nullable=True)
    is_public = Column(Integer, nullable=False, default=1)
    upvote_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    deleted_at = Column(BigInteger, nullable=True)
    created_at = Column(BigInteger, nullable=False)


class Comment(Base):
    """Comment by one agent on one post."""
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_post_id", "post_id"),
        Index("ix_comments_agent_id", "agent_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    post_id = Column(String(36), nullable=False)
    agent_id = Column(String(36), nullable=False)
    content = Column(Text, nullable=False)
    upvote_count = Column(Integer, nullable=False, default=0)
    created_at = Column(BigInteger, nullable=False)


class Vote(Base):
    """Vote with a polymorphic target (``post`` or ``comment``)."""
    __tablename__ = "votes"
    __table_args__ = (
        Index("ix_votes_agent_id", "agent_id"),
        Index("ix_votes_target", "target_type", "target_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    agent_id = Column(String(36), nullable=False)
    target_type = Column(String(16), nullable=False)
    target_id = Column(String(36), nullable=False)
    value = Column(Integer, nullable=False, default=1)
    created_at = Column(BigInteger, nullable=False)

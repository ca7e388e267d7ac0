from sqlalchemy import JSON, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from scout.models.base import Base, TimestampMixin


class TopicGraphSnapshot(Base, TimestampMixin):
    """An immutable computed topic graph; the newest row per tenant is current."""

    __tablename__ = "topic_graph_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[str] = mapped_column(String(100), default="default", index=True)
    params_json: Mapped[dict] = mapped_column(JSON, default=dict)
    graph_json: Mapped[str] = mapped_column(Text)
    node_count: Mapped[int] = mapped_column(Integer, default=0)
    edge_count: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<TopicGraphSnapshot {self.id} {self.tenant_id}: {self.node_count} nodes>"

from sqlalchemy import Column, String, BigInteger, Integer, Text, Boolean, DateTime, CheckConstraint, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from upcycle_hub.db.database import Base


PRODUCT_STATUSES = ("active", "sold", "inactive", "deleted")
PRODUCT_CONDITIONS = ("New", "Like New", "Excellent", "Good", "Fair", "Poor")


class Product(Base):
    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text)
    price_cents = Column(BigInteger, nullable=False)
    category = Column(Text, nullable=False)
    condition = Column(String(20), nullable=False)
    location = Column(Text)
    status = Column(String(20), nullable=False, default="active")
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    deleted_at = Column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("price_cents > 0", name="positive_price"),
        CheckConstraint("status IN ('active', 'sold', 'inactive', 'deleted')", name="status_valid"),
        Index("idx_seller_status", "seller_id", "status"),
        Index("idx_category", "category"),
    )

    seller = relationship("User")
    images = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.created_at",
    )


class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    url = Column(Text, nullable=False)
    is_main = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_product_images_product", "product_id"),
    )

    product = relationship("Product", back_populates="images")

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, Numeric, String, Text, text

from storefront.db import Base


class Order(Base):
    """
    Customer order as the storefront's checkout writes it. Only the table shape is
    owned here; the columns added after the first release are kept in step with
    existing databases by the "orders" migration plan.
    """
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=True, index=True)
    order_number = Column(Text, nullable=True)
    customer_name = Column(Text, nullable=True)
    customer_email = Column(Text, nullable=True)
    customer_phone = Column(Text, nullable=True)
    shipping_address = Column(Text, nullable=True)
    shipping_city = Column(Text, nullable=True)
    payment_method = Column(Text, default="cod", server_default=text("'cod'"))
    payment_status = Column(Text, default="pending", server_default=text("'pending'"))
    shipping_fee = Column(Numeric(12, 2), default=0, server_default=text("0"))
    notes = Column(Text, nullable=True)
    items = Column(JSON, nullable=True)
    status = Column(Text, default="pending", server_default=text("'pending'"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

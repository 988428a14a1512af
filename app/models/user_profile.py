from sqlalchemy import Column, String, DateTime, Integer, Enum as SQLEnum
from datetime import datetime
from ..database import Base
import enum

class SubscriptionTier(str, enum.Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"

class UserProfile(Base):
    __tablename__ = "user_profiles"

    # Same id as the Supabase auth user
    id = Column(String, primary_key=True)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)

    # Counters
    projects_count = Column(Integer, nullable=False, default=0)
    total_generations = Column(Integer, nullable=False, default=0)

    # Subscription
    subscription_tier = Column(
        SQLEnum(
            SubscriptionTier,
            name="subscription_tier",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=SubscriptionTier.FREE,
    )
    subscription_status = Column(String, nullable=False, default="active")
    stripe_customer_id = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

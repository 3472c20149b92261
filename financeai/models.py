from sqlalchemy import Column, Integer, String, Text, Date, DateTime, JSON, Float, Index
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class UserProfile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    occupation = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class FinancialProfile(Base):
    __tablename__ = "financial_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, index=True, nullable=False)
    monthly_income = Column(Float, nullable=True)
    monthly_expenses = Column(Float, nullable=True)
    savings_balance = Column(Float, nullable=True)
    debt_amount = Column(Float, nullable=True)
    credit_score = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<FinancialProfile(user_id='{self.user_id}')>"


class BudgetCategory(Base):
    __tablename__ = "budget_categories"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    allocated_amount = Column(Float, nullable=False)
    spent_amount = Column(Float, default=0.0)
    month_year = Column(String, index=True, nullable=False)  # YYYY-MM
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('idx_budget_user_month', 'user_id', 'month_year'),
    )

    def __repr__(self):
        return f"<BudgetCategory(name='{self.name}', month='{self.month_year}')>"


class FinancialGoal(Base):
    __tablename__ = "financial_goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    target_amount = Column(Float, nullable=False)
    current_amount = Column(Float, default=0.0)
    target_date = Column(Date, nullable=True)
    category = Column(String, nullable=True)
    status = Column(String, default="active")  # 'active', 'completed'
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('idx_goal_user_status', 'user_id', 'status'),
    )


class DebtSubscription(Base):
    __tablename__ = "debts_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # 'debt', 'emi', 'subscription'
    amount = Column(Float, nullable=False)
    due_date = Column(Date, nullable=True)
    frequency = Column(String, default="monthly")  # 'weekly', 'monthly', 'yearly', 'one-time'
    status = Column(String, default="active")  # 'active', 'paid'
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('idx_debt_user_status', 'user_id', 'status'),
    )


class PurchaseDecision(Base):
    __tablename__ = "purchase_decisions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    item_name = Column(String, nullable=False)
    item_price = Column(Float, nullable=False)
    ai_recommendation = Column(String, nullable=False)  # 'approve', 'wait', 'reject'
    reasoning = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index('idx_purchase_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<PurchaseDecision(item='{self.item_name}', recommendation='{self.ai_recommendation}')>"


class AIConversation(Base):
    __tablename__ = "ai_conversations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    user_message = Column(Text, nullable=False)
    ai_response = Column(Text, nullable=False)
    conversation_type = Column(String, default="chat")
    context_data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index('idx_conversation_user_created', 'user_id', 'created_at'),
    )


class CheckIn(Base):
    __tablename__ = "check_ins"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, index=True, nullable=False)
    last_check_in = Column(Date, nullable=True)
    streak_count = Column(Integer, default=0)
    best_streak = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# Table name -> model, the addressable surface of the persistence gateway
TABLES = {
    model.__tablename__: model
    for model in (
        UserProfile, FinancialProfile, BudgetCategory, FinancialGoal,
        DebtSubscription, PurchaseDecision, AIConversation, CheckIn,
    )
}

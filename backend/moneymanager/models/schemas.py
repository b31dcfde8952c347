from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Literal
from datetime import date as Date, datetime
from decimal import Decimal
from enum import Enum


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def collection(self) -> str:
        return "incomes" if self is TransactionKind.INCOME else "expenses"


CategoryType = Literal["income", "expense"]


class ProfileBase(BaseModel):
    full_name: str
    email: EmailStr
    profile_image_url: Optional[str] = None


class ProfileCreate(ProfileBase):
    password: str = Field(min_length=1)


class Profile(ProfileBase):
    """Public projection of a profile: never carries the password hash or activation token."""
    id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    token: str
    token_type: str = "bearer"
    user: Profile


class CategoryBase(BaseModel):
    name: str = Field(min_length=1)
    icon: Optional[str] = None
    type: CategoryType


class CategoryCreate(CategoryBase):
    pass


class Category(CategoryBase):
    id: str
    profile_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionBase(BaseModel):
    name: str = Field(min_length=1)
    icon: Optional[str] = None
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    date: Date


class TransactionCreate(TransactionBase):
    category_id: str


class Transaction(TransactionBase):
    id: str
    category_id: Optional[str] = None
    category_name: str = "N/A"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecentTransaction(TransactionBase):
    """Income or expense flattened into one shape for the dashboard feed."""
    id: str
    profile_id: str
    type: TransactionKind
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DashboardView(BaseModel):
    total_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    recent_5_income: List[Transaction]
    recent_5_expenses: List[Transaction]
    recent_transactions: List[RecentTransaction]


class TransactionFilter(BaseModel):
    type: str
    start_date: Optional[Date] = None
    end_date: Optional[Date] = None
    keyword: Optional[str] = None
    sort_field: Optional[str] = None
    sort_order: Optional[str] = None


class Message(BaseModel):
    message: str

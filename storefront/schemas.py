from decimal import Decimal
from typing import List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, EmailStr, Field, field_validator

UserStatus = Literal['ACTIVE', 'INACTIVE']
OrderStatus = Literal['PENDING', 'PROCESSING', 'SHIPPED', 'DELIVERED', 'CANCELLED']


def _strip(v):
    return v.strip() if isinstance(v, str) else v

def _upper(v):
    return v.strip().upper() if isinstance(v, str) else v

def _lower_email(v):
    if isinstance(v, str):
        v = v.strip().lower()
        if len(v) > 100:
            raise ValueError("Email must be at most 100 characters")
    return v

def _two_decimals(v: float) -> float:
    if Decimal(str(v)).as_tuple().exponent < -2:
        raise ValueError('Price must have at most 2 decimal places')
    return v


# --- auth ---
class LoginPayload(BaseModel):
    username: str
    password: str

class LoginResult(BaseModel):
    token: str
    expiresInMinutes: int


# --- users ---
class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=100)
    email: EmailStr

    trim_names = field_validator('username', 'name', mode='before')(_strip)
    normalize_email = field_validator('email', mode='before')(_lower_email)

class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    password: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    status: Optional[UserStatus] = None

    trim_names = field_validator('username', 'name', mode='before')(_strip)
    normalize_email = field_validator('email', mode='before')(_lower_email)
    normalize_status = field_validator('status', mode='before')(_upper)


# --- products ---
class ProductCreate(BaseModel):
    productCode: str = Field(min_length=1, max_length=10)
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default='', max_length=500)
    price: float = Field(default=0.0, ge=0)
    quantityInStock: int = Field(default=0, ge=0)

    check_price = field_validator('price')(_two_decimals)

class ProductUpdate(BaseModel):
    productCode: Optional[str] = Field(default=None, min_length=1, max_length=10)
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    price: Optional[float] = Field(default=None, ge=0)
    quantityInStock: Optional[int] = Field(default=None, ge=0)

    @field_validator('price')
    @classmethod
    def check_price(cls, v: Optional[float]) -> Optional[float]:
        return v if v is None else _two_decimals(v)


# --- orders ---
class OrderItem(BaseModel):
    product: str
    quantity: int = Field(ge=1)

    @field_validator('product')
    @classmethod
    def check_product_id(cls, v: str) -> str:
        if not ObjectId.is_valid(v):
            raise ValueError('product must be a valid id')
        return v

class OrderCreate(BaseModel):
    # emptiness is checked by the order workflow so it can answer with its own message
    products: List[OrderItem] = []
    status: OrderStatus = 'PENDING'

    normalize_status = field_validator('status', mode='before')(_upper)

class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None

    normalize_status = field_validator('status', mode='before')(_upper)

from .catalog import Product
from .orders import Order
from .expenses import Expense
from .auth import Account
from .settings import StoreSettings

__all__ = [
    'Product',
    'Order',
    'Expense',
    'Account',
    'StoreSettings',
]

from .enums import (
    UserType, InventoryType, ListingType, AcquisitionType,
    RequestStatus, OrderStatus, TransactionType, NotificationType,
)
from .accounts import User, Project
from .inventory import Material
from .orders import OrderRequest, Order
from .transfers import InternalTransfer
from .activity import Notification, TransactionHistory

__all__ = [
    'UserType', 'InventoryType', 'ListingType', 'AcquisitionType',
    'RequestStatus', 'OrderStatus', 'TransactionType', 'NotificationType',
    'User', 'Project',
    'Material',
    'OrderRequest', 'Order',
    'InternalTransfer',
    'Notification', 'TransactionHistory',
]

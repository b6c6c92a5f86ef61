from .tenancy import Tenant
from .auth import User, SessionToken
from .security import SecurityEvent
from .masters import MasterRecord, KycRecord
from .lots import Lot, MaterialRow, LogisticsDetail, MeltingDetail, DisbursementRecord
from .sales import SalesOrder, SalesOrderItem
from .settings import GlobalSetting
from .audit import AuditLog
from .documents import DocumentSequence
from .sync import SyncReceipt

__all__ = [
    'Tenant',
    'User', 'SessionToken', 'SecurityEvent',
    'MasterRecord', 'KycRecord',
    'Lot', 'MaterialRow', 'LogisticsDetail', 'MeltingDetail', 'DisbursementRecord',
    'SalesOrder', 'SalesOrderItem',
    'GlobalSetting', 'AuditLog', 'DocumentSequence', 'SyncReceipt',
]

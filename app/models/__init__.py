from app.models.base import Base
from app.models.snaptrade_account import SnapTradeAccount
from app.models.snaptrade_activity import SnapTradeActivity
from app.models.snaptrade_connection import SnapTradeConnection
from app.models.trade import Trade
from app.models.user import User

__all__ = [
    "Base",
    "User",
    "SnapTradeConnection",
    "SnapTradeAccount",
    "SnapTradeActivity",
    "Trade",
]

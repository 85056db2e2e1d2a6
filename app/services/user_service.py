import logging

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models import User
from app.models.base import utcnow
from app.services.base import get_by_id
from app.services.sync.trade_deriver import PrivacyDefaults

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: str) -> User:
    """Get a user or raise NotFoundError."""
    user = get_by_id(db, User, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


def get_privacy_defaults(db: Session, user_id: str) -> PrivacyDefaults:
    """
    Read the privacy settings new trades inherit.

    Unset columns fall back to amounts and quantity hidden, visibility public.
    """
    user = get_user(db, user_id)
    return PrivacyDefaults(
        show_amounts=bool(user.show_amounts),
        show_quantity=bool(user.show_quantity),
        visibility=user.visibility or "public",
    )


def mark_trade_sync(db: Session, user_id: str) -> User:
    """Stamp the user's last activity sync time. Does not commit."""
    user = get_user(db, user_id)
    user.last_trade_sync_at = utcnow()
    db.flush()
    return user


def assign_snaptrade_credentials(
    db: Session, user_id: str, snaptrade_user_id: str, snaptrade_user_secret: str
) -> User:
    """Attach SnapTrade credentials to an app user."""
    user = get_user(db, user_id)
    user.snaptrade_user_id = snaptrade_user_id
    user.snaptrade_user_secret = snaptrade_user_secret
    user.snaptrade_created_at = utcnow()
    db.commit()
    db.refresh(user)
    logger.info("Assigned SnapTrade user %s to app user %s", snaptrade_user_id, user_id)
    return user


def clear_snaptrade_credentials(db: Session, user_id: str) -> User:
    """Detach SnapTrade credentials from an app user."""
    user = get_user(db, user_id)
    user.snaptrade_user_id = None
    user.snaptrade_user_secret = None
    user.snaptrade_created_at = None
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session) -> list[User]:
    """List users, newest first."""
    return db.query(User).order_by(User.created_at.desc()).all()

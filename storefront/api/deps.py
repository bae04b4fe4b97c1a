# storefront/api/deps.py
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.services.cart_service import CartService
from storefront.services.catalog import ProductCatalog, get_catalog
from storefront.services.identity_service import IdentitySyncService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.utils.settings import CHECKOUT_LOCK_ENABLED


def get_subject_id(x_subject_id: str | None = Header(default=None)) -> str | None:
    # set by the authenticating proxy after the OIDC handshake
    if x_subject_id is None:
        return None
    return x_subject_id.strip() or None


def get_lock_service() -> LockService | None:
    return LockService() if CHECKOUT_LOCK_ENABLED else None


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_identity_service(db: Session = Depends(get_db)) -> IdentitySyncService:
    return IdentitySyncService(db)


def get_cart_service(
    db: Session = Depends(get_db),
    catalog: ProductCatalog = Depends(get_catalog),
) -> CartService:
    return CartService(db=db, catalog=catalog)


def get_order_service(
    db: Session = Depends(get_db),
    lock_service: LockService | None = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> OrderService:
    return OrderService(db, lock_service=lock_service, notification_service=notification_service)

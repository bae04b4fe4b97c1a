# storefront/services/identity_service.py
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import MissingSubjectError, PersistenceError, ProfileNotFoundError
from storefront.domain.schemas import UserRead
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_WS_CLAIMS = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/"

# candidate claim keys per field, first non-empty value wins
SUBJECT_KEYS: Tuple[str, ...] = (_WS_CLAIMS + "nameidentifier", "sub")
EMAIL_KEYS: Tuple[str, ...] = (_WS_CLAIMS + "emailaddress", "email")
NAME_KEYS: Tuple[str, ...] = (_WS_CLAIMS + "name", "name", "preferred_username")
GIVEN_NAME_KEYS: Tuple[str, ...] = (_WS_CLAIMS + "givenname", "given_name")
FAMILY_NAME_KEYS: Tuple[str, ...] = (_WS_CLAIMS + "surname", "family_name")
EMAIL_VERIFIED_KEYS: Tuple[str, ...] = ("email_verified",)


def first_claim(claims: Mapping[str, Any], keys: Tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = claims.get(key)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return value
    return None


def parse_bool_claim(claims: Mapping[str, Any], keys: Tuple[str, ...]) -> Optional[bool]:
    for key in keys:
        value = claims.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
    return None


def resolve_display_name(claims: Mapping[str, Any]) -> Optional[str]:
    name = first_claim(claims, NAME_KEYS)
    if name:
        return name

    given = first_claim(claims, GIVEN_NAME_KEYS) or ""
    family = first_claim(claims, FAMILY_NAME_KEYS) or ""
    return f"{given} {family}".strip() or None


class IdentitySyncService:
    """
    Keeps the local user profile in step with the identity provider.

    sync_profile runs once per login with the verified claim set. The first
    login creates the profile, later logins only overwrite fields for which the
    provider sent a non-empty value, so a sparse token never wipes data.
    """

    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def sync_profile(self, claims: Mapping[str, Any]) -> UserRead:
        subject_id = first_claim(claims, SUBJECT_KEYS)
        email = first_claim(claims, EMAIL_KEYS)
        display_name = resolve_display_name(claims)
        email_verified = parse_bool_claim(claims, EMAIL_VERIFIED_KEYS)

        logger.debug(f"Claims received for sync: {sorted(claims.keys())}")

        if not subject_id:
            logger.error("Cannot sync user: subject claim (sub or nameidentifier) is missing")
            raise MissingSubjectError("Identity claims do not contain a subject identifier")

        logger.info(
            f"Syncing profile {subject_id}: email={email!r}, name={display_name!r}, "
            f"email_verified={email_verified}"
        )

        now = datetime.now(timezone.utc)
        user = self.repo.get_user(subject_id)

        if user is None:
            user = self._create(subject_id, email, display_name, email_verified, now)
        else:
            self._update(user, email, display_name, email_verified, now)

        self.repo.commit()
        return UserRead.model_validate(self.repo.refresh(user))

    def _create(self, subject_id, email, display_name, email_verified, now) -> UserModel:
        user = UserModel(
            subject_id=subject_id,
            email=email,
            display_name=display_name,
            email_verified=bool(email_verified),
            last_login_at=now,
        )
        self.repo.add_user(user)

        try:
            self.repo.db.flush()
        except IntegrityError:
            # a parallel first login inserted the row between our read and write
            self.repo.rollback()
            existing = self.repo.get_user(subject_id)
            if existing is None:
                raise PersistenceError(f"Could not create profile {subject_id}")
            logger.info(f"Profile {subject_id} was created concurrently, updating instead")
            self._update(existing, email, display_name, email_verified, now)
            return existing
        except SQLAlchemyError as e:
            logger.exception(f"Failed to create profile {subject_id}")
            self.repo.rollback()
            raise PersistenceError(f"Could not create profile {subject_id}") from e

        logger.info(f"Created profile {subject_id} on first login")
        return user

    def _update(self, user: UserModel, email, display_name, email_verified, now) -> None:
        changed = []

        if email and user.email != email:
            user.email = email
            changed.append("email")

        if display_name and user.display_name != display_name:
            user.display_name = display_name
            changed.append("display_name")

        if email_verified is not None and user.email_verified != email_verified:
            user.email_verified = email_verified
            changed.append("email_verified")

        user.last_login_at = now

        if changed:
            logger.info(f"Updated profile {user.subject_id}: {', '.join(changed)}")
        else:
            logger.info(f"Profile {user.subject_id} already up to date, login time refreshed")

    def get_profile(self, subject_id: str) -> UserRead:
        user = self.repo.get_user(subject_id) if subject_id else None
        if user is None:
            raise ProfileNotFoundError("User profile not found. Please try logging in again.")
        return UserRead.model_validate(user)

    def update_contact_details(
        self,
        subject_id: str,
        default_shipping_address: str | None = None,
        phone_number: str | None = None,
    ) -> UserRead:
        user = self.repo.get_user(subject_id) if subject_id else None
        if user is None:
            raise ProfileNotFoundError("User profile not found. Please try logging in again.")

        if default_shipping_address and default_shipping_address.strip():
            user.default_shipping_address = default_shipping_address.strip()
        if phone_number and phone_number.strip():
            user.phone_number = phone_number.strip()

        self.repo.commit()
        logger.info(f"Saved checkout defaults for {subject_id}")
        return UserRead.model_validate(self.repo.refresh(user))

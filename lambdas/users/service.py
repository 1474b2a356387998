"""User service - identity registration and display-name sequencing."""

from aws_lambda_powertools import Logger

from shared.exceptions import InvalidRequestError, StoreUnavailableError
from shared.models import PrivilegedDevice, UserIdentityRecord, UserKind
from shared.quota_store import QuotaStore
from shared.utils import utc_now
from users.models import RegisterUserRequest, SyncPrivilegedDevicesResponse

logger = Logger()

UNKNOWN_DEVICE = "unknown"


def get_user_kind(user_id: str, devices: list[PrivilegedDevice]) -> UserKind:
    """Privileged if the user is on the device list, otherwise ordinary."""
    if any(device.user_id == user_id for device in devices):
        return UserKind.PRIVILEGED
    return UserKind.ORDINARY


def get_device_name(user_id: str, devices: list[PrivilegedDevice]) -> str:
    """Name of the user's device on the list, or 'unknown'."""
    for device in devices:
        if device.user_id == user_id:
            return device.name
    return UNKNOWN_DEVICE


def next_display_name(kind: UserKind, identities: list[UserIdentityRecord]) -> str:
    """Assign the next sequential display name for a kind.

    Takes the highest number ever issued with the kind's prefix and adds
    one; gaps are ignored and numbers are never reused.

    Args:
        kind: Identity kind
        identities: All existing identity records

    Returns:
        Display name such as 'U-7' or 'P-3'
    """
    highest = max(
        (number for identity in identities for number in identity.issued_sequence_numbers(kind)),
        default=0,
    )
    return f"{kind.value}-{highest + 1}"


class UserService:
    """Service layer for user identity records."""

    def __init__(
        self,
        store: QuotaStore,
        privileged_devices: list[PrivilegedDevice] | None = None,
    ) -> None:
        """Initialize user service.

        Args:
            store: Quota store holding identity records
            privileged_devices: Deploy-time list of privileged devices
        """
        self.store = store
        self.privileged_devices = privileged_devices or []

    def register_user(self, user_id: str, request: RegisterUserRequest) -> dict:
        """Create or refresh the caller's identity record.

        New users get the next display name of their kind. Existing users
        only get their device info refreshed when it changed.

        Args:
            user_id: Opaque user ID of the caller
            request: Registration payload

        Returns:
            Success marker

        Raises:
            InvalidRequestError: If user_id is empty
            StoreUnavailableError: If the identity cannot be read or written
        """
        if not user_id:
            raise InvalidRequestError("userId must be provided", field="user_id")

        existing = self.store.get_user_identity(user_id)
        device_info = request.device_info.model_dump(mode="json")

        if existing is None:
            kind = get_user_kind(user_id, self.privileged_devices)
            display_name = next_display_name(kind, self.store.list_user_identities())
            self.store.upsert_user_identity(
                user_id,
                {
                    "user_id": user_id,
                    "display_name": display_name,
                    "kind": kind.value,
                    "device": get_device_name(user_id, self.privileged_devices),
                    "device_info": device_info,
                    "is_native": request.is_native,
                    "created_at": utc_now(),
                },
            )
            logger.info(
                "Inserted user identity",
                extra={"user_id": user_id, "display_name": display_name, "kind": kind.value},
            )
        elif existing.device_info != request.device_info or existing.is_native != request.is_native:
            self.store.upsert_user_identity(
                user_id,
                {
                    "device_info": device_info,
                    "is_native": request.is_native,
                    "last_updated": utc_now(),
                },
            )
            logger.info("Updated user identity device info", extra={"user_id": user_id})

        return {"success": True}

    def sync_privileged_devices(
        self, devices: list[PrivilegedDevice] | None = None
    ) -> SyncPrivilegedDevicesResponse:
        """Make every configured device's user a privileged identity.

        Unknown users are created as privileged; ordinary users are
        promoted with a new privileged name. A failure on one device is
        logged and the remaining devices are still processed.

        Args:
            devices: Privileged device list, defaults to the configured one

        Returns:
            User IDs created and promoted

        Raises:
            StoreUnavailableError: If existing identities cannot be listed
        """
        if devices is None:
            devices = self.privileged_devices
        identities = {identity.user_id: identity for identity in self.store.list_user_identities()}
        result = SyncPrivilegedDevicesResponse()

        for device in devices:
            existing = identities.get(device.user_id)
            if existing is not None and existing.kind == UserKind.PRIVILEGED:
                logger.debug("Identity already privileged", extra={"user_id": device.user_id})
                continue

            display_name = next_display_name(UserKind.PRIVILEGED, list(identities.values()))
            now = utc_now()
            try:
                if existing is None:
                    fields = {
                        "user_id": device.user_id,
                        "display_name": display_name,
                        "kind": UserKind.PRIVILEGED.value,
                        "device": device.name,
                        "created_at": now,
                    }
                    self.store.upsert_user_identity(device.user_id, fields)
                    identities[device.user_id] = UserIdentityRecord(**fields)
                    result.created.append(device.user_id)
                else:
                    former = [*existing.former_display_names, existing.display_name]
                    self.store.upsert_user_identity(
                        device.user_id,
                        {
                            "display_name": display_name,
                            "kind": UserKind.PRIVILEGED.value,
                            "device": device.name,
                            "former_display_names": former,
                            "last_updated": now,
                        },
                    )
                    identities[device.user_id] = existing.model_copy(
                        update={
                            "display_name": display_name,
                            "kind": UserKind.PRIVILEGED,
                            "device": device.name,
                            "former_display_names": former,
                            "last_updated": now,
                        }
                    )
                    result.promoted.append(device.user_id)
            except StoreUnavailableError as e:
                logger.error(
                    "Failed to update identity for privileged device",
                    extra={"user_id": device.user_id, "device": device.name, "error": e.message},
                )
                continue

            logger.info(
                "Privileged identity stored",
                extra={"user_id": device.user_id, "display_name": display_name},
            )

        return result

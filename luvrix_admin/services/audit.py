from luvrix_admin.errors import ApiError
from luvrix_admin.logging_setup import log_event


def record_admin_action(client, admin_id: str | None, action: str, target_id=None, details: str | None = None) -> bool:
    """
    Write an entry to the platform's admin log.
    The action it describes has already happened, so a failure here is logged and swallowed.
    """
    entry = {"adminId": admin_id, "action": action, "targetId": target_id}
    if details is not None:
        entry["details"] = details
    try:
        client.create_log(entry)
        return True
    except ApiError as e:
        log_event(
            "audit_log_failed",
            level="warning",
            action=action,
            target_id=str(target_id) if target_id is not None else None,
            error=e.message,
            status_code=e.status_code,
        )
        return False

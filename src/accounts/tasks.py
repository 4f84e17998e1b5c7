"""Celery tasks for admin accounts."""
import logging

from celery import shared_task

logger = logging.getLogger("backoffice")


@shared_task(name="accounts.tasks.auto_unlock_expired_accounts")
def auto_unlock_expired_accounts():
    """Run the lock-expiry sweep over every admin account (Celery Beat)."""
    from accounts.lockout import sweep_auto_unlock

    modified = sweep_auto_unlock()
    logger.info("auto_unlock_expired_accounts completed: %d account(s) unlocked.", modified)
    return modified


@shared_task(name="accounts.tasks.send_failed_login_warning_task")
def send_failed_login_warning_task(*, account_id, failed_attempts: int):
    from accounts.models import User
    from accounts.services import send_failed_login_warning

    account = User.objects.filter(pk=account_id).first()
    if account is None:
        logger.warning("send_failed_login_warning_task: admin=%s no longer exists", account_id)
        return False
    return send_failed_login_warning(account, failed_attempts)

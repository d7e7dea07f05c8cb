"""이메일 발송 유틸리티 — Brevo SMTP (aiosmtplib).

SMTP 설정은 config.py의 SMTP_* 환경 변수로 관리.
Also hosts the PASSWORD_RECOVERY subscriber that mails reset links.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from app.config import settings
from app.services.auth_events import AuthEvent, AuthEventType

logger = logging.getLogger("issue-tracker.email")


async def send_email(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
) -> None:
    """이메일 발송.

    Args:
        to: 수신자 이메일 주소
        subject: 제목
        html: HTML 본문
        text: 플레인텍스트 본문 (없으면 html에서 자동 생략)
    """
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to

    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    await aiosmtplib.send(
        msg,
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        start_tls=True,
    )


def recovery_link(token: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?token={token}"


async def send_recovery_email(event: AuthEvent) -> None:
    """PASSWORD_RECOVERY 이벤트 구독자 — 재설정 링크 메일 발송.

    Other event types are ignored. Delivery failures are logged and
    contained: the recovery request itself still succeeds.
    """
    if event.type is not AuthEventType.PASSWORD_RECOVERY or not event.email or not event.token:
        return
    if not settings.SMTP_USER or not settings.SMTP_FROM_EMAIL:
        logger.warning("SMTP not configured; recovery mail for %s not sent", event.email)
        return

    link: str = recovery_link(event.token)
    minutes: int = settings.JWT_RECOVERY_TOKEN_EXPIRE_MINUTES
    try:
        await send_email(
            to=event.email,
            subject=f"{settings.APP_NAME}: Reset your password",
            html=(
                f"<p>We received a request to reset your password.</p>"
                f'<p><a href="{link}">Set a new password</a></p>'
                f"<p>This link expires in {minutes} minutes.</p>"
            ),
            text=f"Reset your password: {link} (expires in {minutes} minutes)",
        )
    except (aiosmtplib.SMTPException, OSError) as exc:
        logger.warning("Recovery mail to %s failed: %s", event.email, exc)

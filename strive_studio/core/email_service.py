import logging
from typing import Optional

import resend

from strive_studio.config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, message: str, html_content: Optional[str] = None) -> bool:
    """
    Envía email usando Resend API. Nunca lanza: retorna False si falla.
    """
    if not settings.RESEND_API_KEY:
        logger.warning(f"📧 [RESEND] Sin API key, no se envía email a {to_email}")
        return False

    resend.api_key = settings.RESEND_API_KEY
    try:
        logger.info(f"📧 [RESEND] Enviando email a: {to_email}")

        params = {
            "from": settings.SENDER_EMAIL,
            "to": [to_email],
            "subject": subject,
            "text": message,
        }
        if html_content:
            params["html"] = html_content

        email = resend.Emails.send(params)

        logger.info(f"✅ [RESEND] Email enviado. ID: {email['id']}")
        return True

    except Exception as e:
        logger.error(f"❌ [RESEND] Error: {e}")
        return False


def send_invitacion_email(to_email: str, rol: str, token: str, dias_validez: int,
                          mensaje_personalizado: Optional[str] = None) -> bool:
    enlace = f"{settings.FRONTEND_BASE_URL.rstrip('/')}/onboarding/{token}"
    puesto = "Coach" if rol == "coach" else "Staff"

    extra_html = f"<p><em>{mensaje_personalizado}</em></p>" if mensaje_personalizado else ""
    html_content = f"""
    <html>
    <body style="font-family: Arial, sans-serif;">
        <h2>Te invitamos a unirte a Strive Studio</h2>
        <p>Has sido invitado como <strong>{puesto}</strong>.</p>
        {extra_html}
        <p>Completa tu registro aquí:</p>
        <p><a href="{enlace}">{enlace}</a></p>
        <p>El enlace vence en {dias_validez} días.</p>
    </body>
    </html>
    """

    text_content = (
        f"Has sido invitado a Strive Studio como {puesto}.\n"
        f"{mensaje_personalizado or ''}\n"
        f"Completa tu registro en: {enlace}\n"
        f"El enlace vence en {dias_validez} días."
    )

    return send_email(
        to_email=to_email,
        subject=f"Invitación a Strive Studio - {puesto}",
        message=text_content,
        html_content=html_content,
    )

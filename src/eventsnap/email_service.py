"""Host credential e-mails, delivered through Amazon SES."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EmailSettings(BaseSettings):
    sender: str = "noreply@eventsnap.app"
    region: str = "us-east-1"
    enabled: bool = False

    model_config = SettingsConfigDict(env_prefix="EMAIL_", env_file=".env", extra="ignore")


@dataclass(frozen=True)
class EventCredentials:
    title: str
    public_event_id: str
    password: str
    scheduled_date: datetime
    upload_url: str
    description: str = ""


def build_credentials_message(creds: EventCredentials) -> tuple[str, str]:
    subject = f"Your EventSnap event: {creds.title}"
    body = "\n".join(
        [
            f"Your event \"{creds.title}\" is ready.",
            "",
            f"Date: {creds.scheduled_date:%Y-%m-%d}",
            f"Event ID: {creds.public_event_id}",
            f"Password: {creds.password}",
            "",
            f"Guests can upload photos at {creds.upload_url}",
            "Log in as host with the event ID and password above to moderate photos.",
        ]
    )
    return subject, body


class EmailNotifier:
    def __init__(self, settings: EmailSettings | None = None, client=None):
        self.settings = settings or EmailSettings()
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("ses", region_name=self.settings.region)
        return self._client

    def _send(self, to: str, subject: str, body: str) -> None:
        self.client.send_email(
            Source=self.settings.sender,
            Destination={"ToAddresses": [to]},
            Message={"Subject": {"Data": subject}, "Body": {"Text": {"Data": body}}},
        )

    async def send_event_credentials(self, host_email: str, creds: EventCredentials) -> bool:
        """Best-effort delivery; returns whether the message was handed to SES."""
        if not self.settings.enabled:
            logger.info("Email delivery disabled, not sending credentials for %s", creds.public_event_id)
            return False

        subject, body = build_credentials_message(creds)
        try:
            await asyncio.to_thread(self._send, host_email, subject, body)
        except (BotoCoreError, ClientError) as e:
            logger.warning("Failed to send credentials for %s: %s", creds.public_event_id, e)
            return False
        logger.info("Sent credentials for %s", creds.public_event_id)
        return True

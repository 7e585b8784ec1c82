"""Slack delivery of audit findings."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackClientError

from .errors import CollaboratorError
from .findings import Finding

logger = logging.getLogger(__name__)

WARNING_COLOR = "#ff6347"


def finding_attachment(finding: Finding) -> Dict[str, Any]:
    """Return the legacy message attachment used to render ``finding``."""

    return {
        "color": WARNING_COLOR,
        "fields": [
            {"title": item.title, "value": item.value, "short": item.short}
            for item in finding.fields
        ],
    }


class SlackNotifier:
    """Post a batch of findings to a channel as header, findings and footer."""

    def __init__(
        self,
        client: WebClient,
        channel: str,
        *,
        username: Optional[str] = None,
        icon_emoji: Optional[str] = None,
    ) -> None:
        self.client = client
        self.channel = channel
        self.username = username
        self.icon_emoji = icon_emoji

    @classmethod
    def from_token(cls, token: str, channel: str, **kwargs: Any) -> "SlackNotifier":
        return cls(WebClient(token=token), channel, **kwargs)

    def notify(self, findings: Iterable[Finding], prefix: str, suffix: str) -> None:
        self._post("post prefix message", text=prefix)
        for finding in findings:
            self._post("post attachments", text="", attachments=[finding_attachment(finding)])
        self._post("post suffix message", text=suffix)

    def _post(self, phase: str, *, text: str, attachments: Optional[List[Dict[str, Any]]] = None) -> None:
        kwargs: Dict[str, Any] = {"channel": self.channel, "text": text}
        if attachments:
            kwargs["attachments"] = attachments
        if self.username:
            kwargs["username"] = self.username
        if self.icon_emoji:
            kwargs["icon_emoji"] = self.icon_emoji
        try:
            self.client.chat_postMessage(**kwargs)
        except SlackClientError as exc:
            raise CollaboratorError(phase, exc) from exc


__all__ = ["SlackNotifier", "WARNING_COLOR", "finding_attachment"]

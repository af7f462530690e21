"""Slack incoming-webhook payloads.

Two shapes are supported and selected by the ``message_style`` setting:
a rich attachment message and a flat ``{username, icon_url, text}`` message.
"""

from pydantic import BaseModel


class SlackField(BaseModel):
    title: str
    value: str
    short: bool = True


class SlackAttachment(BaseModel):
    fallback: str
    author_name: str
    author_link: str | None = None
    author_icon: str | None = None
    title: str
    title_link: str
    text: str = ""
    fields: list[SlackField] = []
    image_url: str | None = None
    thumb_url: str | None = None


class RichMessage(BaseModel):
    attachments: list[SlackAttachment]


class FlatMessage(BaseModel):
    username: str | None = None
    icon_url: str | None = None
    text: str

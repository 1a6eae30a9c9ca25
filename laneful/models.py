"""
Data Models Module

Immutable Pydantic models for the email-send request body. Validation errors
are raised as ValidationException so callers handle a single SDK error type.
"""

from __future__ import annotations

import base64
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from laneful.exceptions import ValidationException

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

CONTENT_TYPES: Dict[str, str] = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".txt": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class BaseLanefulModel(BaseModel):
    """Base model with common configuration for all request models"""
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
    )


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# --------------------------
# Address / Attachment / Tracking
# --------------------------

class Address(BaseLanefulModel):
    """An email address with an optional display name."""

    email: str = Field(..., description="Email address")
    name: Optional[str] = Field(default=None, description="Display name")

    def __init__(self, email: Optional[str] = None, name: Optional[str] = None, **data: Any):
        super().__init__(email=email, name=name, **data)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v: Any) -> Any:
        if _is_blank(v):
            raise ValidationException("Email address cannot be empty")
        if not isinstance(v, str) or not EMAIL_PATTERN.match(v):
            raise ValidationException(f"Invalid email address format: {v}")
        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Address":
        email = data.get("email")
        if email is None:
            raise ValidationException("Email address is required")
        name = data.get("name")
        return cls(str(email), str(name) if name is not None else None)

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>" if self.name and self.name.strip() else self.email


class Attachment(BaseLanefulModel):
    """A file attachment; content is base64-encoded."""

    filename: str
    content_type: str
    content: str

    def __init__(
        self,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        content: Optional[str] = None,
        **data: Any,
    ):
        super().__init__(filename=filename, content_type=content_type, content=content, **data)

    @model_validator(mode="before")
    @classmethod
    def require_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            if _is_blank(data.get("filename")):
                raise ValidationException("Filename cannot be empty")
            if _is_blank(data.get("content_type")):
                raise ValidationException("Content type cannot be empty")
            if _is_blank(data.get("content")):
                raise ValidationException("Content cannot be empty")
        return data

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "Attachment":
        """Read a file from disk and base64-encode it."""
        path = Path(file_path)
        if not path.is_file():
            raise ValidationException(f"File not found: {file_path}")
        content = base64.b64encode(path.read_bytes()).decode("ascii")
        content_type = CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)
        return cls(path.name, content_type, content)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Attachment":
        filename = data.get("filename")
        content_type = data.get("content_type")
        content = data.get("content")
        if filename is None or content_type is None or content is None:
            raise ValidationException("Filename, content_type, and content are required")
        return cls(str(filename), str(content_type), str(content))

    def __str__(self) -> str:
        return (
            f"Attachment(filename={self.filename!r}, content_type={self.content_type!r}, "
            f"content_length={len(self.content)})"
        )


class TrackingSettings(BaseLanefulModel):
    """Open / click / unsubscribe tracking flags."""

    opens: bool = False
    clicks: bool = False
    unsubscribes: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrackingSettings":
        def flag(key: str) -> bool:
            value = data.get(key)
            return value if isinstance(value, bool) else False

        return cls(opens=flag("opens"), clicks=flag("clicks"), unsubscribes=flag("unsubscribes"))


# --------------------------
# Email
# --------------------------

class Email(BaseLanefulModel):
    """
    A single email to be sent.

    Build one with ``Email.builder()`` or ``Email.from_dict()``. Serialized
    with ``to_payload()`` into the snake_case body the API expects.
    """

    from_address: Optional[Address] = Field(default=None, alias="from")
    to: Tuple[Address, ...] = ()
    cc: Optional[Tuple[Address, ...]] = None
    bcc: Optional[Tuple[Address, ...]] = None
    subject: str = ""
    text_content: Optional[str] = None
    html_content: Optional[str] = None
    template_id: Optional[str] = None
    template_data: Optional[Dict[str, Any]] = None
    attachments: Optional[Tuple[Attachment, ...]] = None
    headers: Optional[Dict[str, str]] = None
    reply_to: Optional[Address] = None
    send_time: Optional[int] = Field(default=None, description="Unix timestamp for scheduled delivery")
    webhook_data: Optional[Dict[str, str]] = None
    tag: Optional[str] = None
    tracking: Optional[TrackingSettings] = None

    @field_validator("cc", "bcc", "attachments", mode="after")
    @classmethod
    def empty_to_none(cls, v: Optional[Tuple[Any, ...]]) -> Optional[Tuple[Any, ...]]:
        return v or None

    @model_validator(mode="after")
    def validate_email(self) -> "Email":
        if self.from_address is None:
            raise ValidationException("From address is required")

        if not self.to and not self.cc and not self.bcc:
            raise ValidationException("Email must have at least one recipient (to, cc, or bcc)")

        has_content = not _is_blank(self.text_content) or not _is_blank(self.html_content)
        has_template = not _is_blank(self.template_id)
        if not has_content and not has_template:
            raise ValidationException("Email must have either content (text/HTML) or a template ID")

        if self.send_time is not None and self.send_time <= int(time.time()):
            raise ValidationException("Send time must be in the future")

        return self

    @classmethod
    def builder(cls) -> "EmailBuilder":
        return EmailBuilder()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Email":
        """Create an Email from its dict (API body) representation."""
        builder = EmailBuilder()

        if isinstance(data.get("from"), dict):
            builder.from_address(Address.from_dict(data["from"]))

        for key, add in (("to", builder.to), ("cc", builder.cc), ("bcc", builder.bcc)):
            items = data.get(key)
            if isinstance(items, list):
                for item in items:
                    if isinstance(item, dict):
                        add(Address.from_dict(item))

        if "subject" in data:
            builder.subject("" if data["subject"] is None else str(data["subject"]))
        if data.get("text_content") is not None:
            builder.text_content(str(data["text_content"]))
        if data.get("html_content") is not None:
            builder.html_content(str(data["html_content"]))
        if data.get("template_id") is not None:
            builder.template_id(str(data["template_id"]))
        if isinstance(data.get("template_data"), dict):
            builder.template_data(data["template_data"])

        attachments = data.get("attachments")
        if isinstance(attachments, list):
            for item in attachments:
                if isinstance(item, dict):
                    builder.attachment(Attachment.from_dict(item))

        if isinstance(data.get("headers"), dict):
            builder.headers({k: str(v) for k, v in data["headers"].items()})
        if isinstance(data.get("reply_to"), dict):
            builder.reply_to(Address.from_dict(data["reply_to"]))

        send_time = data.get("send_time")
        if isinstance(send_time, int) and not isinstance(send_time, bool):
            builder.send_time(send_time)

        if isinstance(data.get("webhook_data"), dict):
            builder.webhook_data({k: str(v) for k, v in data["webhook_data"].items()})
        if data.get("tag") is not None:
            builder.tag(str(data["tag"]))
        if isinstance(data.get("tracking"), dict):
            builder.tracking(TrackingSettings.from_dict(data["tracking"]))

        return builder.build()

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with ``from`` as the sender key and unset fields omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        return (
            f"Email(from={self.from_address}, to={len(self.to)}, subject={self.subject!r}, "
            f"has_text={not _is_blank(self.text_content)}, has_html={not _is_blank(self.html_content)}, "
            f"template_id={self.template_id!r}, attachments={len(self.attachments or ())})"
        )


AddressLike = Union[Address, str]


def _address(value: AddressLike, name: Optional[str] = None) -> Address:
    return value if isinstance(value, Address) else Address(value, name)


class EmailBuilder:
    """Fluent builder for Email. Every setter returns the builder."""

    def __init__(self):
        self._from: Optional[Address] = None
        self._to: List[Address] = []
        self._cc: List[Address] = []
        self._bcc: List[Address] = []
        self._attachments: List[Attachment] = []
        self._fields: Dict[str, Any] = {"subject": ""}

    def from_address(self, address: AddressLike, name: Optional[str] = None) -> "EmailBuilder":
        self._from = _address(address, name)
        return self

    def to(self, address: AddressLike, name: Optional[str] = None) -> "EmailBuilder":
        self._to.append(_address(address, name))
        return self

    def cc(self, address: AddressLike, name: Optional[str] = None) -> "EmailBuilder":
        self._cc.append(_address(address, name))
        return self

    def bcc(self, address: AddressLike, name: Optional[str] = None) -> "EmailBuilder":
        self._bcc.append(_address(address, name))
        return self

    def reply_to(self, address: Optional[AddressLike], name: Optional[str] = None) -> "EmailBuilder":
        self._fields["reply_to"] = None if address is None else _address(address, name)
        return self

    def attachment(self, attachment: Attachment) -> "EmailBuilder":
        self._attachments.append(attachment)
        return self

    def subject(self, subject: str) -> "EmailBuilder":
        self._fields["subject"] = subject
        return self

    def text_content(self, text: Optional[str]) -> "EmailBuilder":
        self._fields["text_content"] = text
        return self

    def html_content(self, html: Optional[str]) -> "EmailBuilder":
        self._fields["html_content"] = html
        return self

    def template_id(self, template_id: Optional[str]) -> "EmailBuilder":
        self._fields["template_id"] = template_id
        return self

    def template_data(self, data: Optional[Dict[str, Any]]) -> "EmailBuilder":
        self._fields["template_data"] = data
        return self

    def headers(self, headers: Optional[Dict[str, str]]) -> "EmailBuilder":
        self._fields["headers"] = headers
        return self

    def send_time(self, send_time: Optional[int]) -> "EmailBuilder":
        self._fields["send_time"] = send_time
        return self

    def webhook_data(self, data: Optional[Dict[str, str]]) -> "EmailBuilder":
        self._fields["webhook_data"] = data
        return self

    def tag(self, tag: Optional[str]) -> "EmailBuilder":
        self._fields["tag"] = tag
        return self

    def tracking(self, tracking: Optional[TrackingSettings]) -> "EmailBuilder":
        self._fields["tracking"] = tracking
        return self

    def build(self) -> Email:
        if self._from is None:
            raise ValidationException("From address is required")
        return Email(
            from_address=self._from,
            to=tuple(self._to),
            cc=tuple(self._cc),
            bcc=tuple(self._bcc),
            attachments=tuple(self._attachments),
            **self._fields,
        )

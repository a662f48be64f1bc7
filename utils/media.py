# utils/media.py
import base64
import mimetypes
from typing import List, Optional

from domain.models import Attachment

DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(filename: str, declared: Optional[str] = None) -> str:
    if declared:
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME_TYPE


def to_data_url(attachment: Attachment) -> str:
    """
    Encode an attachment the way the report store expects:
    "data:<mime>;base64,<payload>"
    """
    encoded = base64.b64encode(attachment.content).decode("ascii")
    return f"data:{attachment.mime_type};base64,{encoded}"


def encode_attachments(attachments: List[Attachment]) -> List[str]:
    return [to_data_url(a) for a in attachments]

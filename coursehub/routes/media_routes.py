from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import StreamingResponse
from typing import Optional
import logging

from coursehub.core.dependencies import get_current_user, get_media_streamer
from coursehub.models.user_model import User
from coursehub.services.media_streamer import MediaStreamer

logger = logging.getLogger(__name__)
# Mounted at the application root so Content.url values resolve as-is
router = APIRouter(prefix="/uploads", tags=["Media"])


@router.get("/{category}/{filename}")
def stream_media(
    category: str,
    filename: str,
    range_header: Optional[str] = Header(None, alias="Range"),
    streamer: MediaStreamer = Depends(get_media_streamer),
    current_user: User = Depends(get_current_user)
):
    """
    Serve an uploaded file, honouring a single `Range: bytes=start-end` header.
    """
    media = streamer.open(f"{category}/{filename}", range_header)
    logger.debug(
        f"User {current_user.id} streaming {category}/{filename} "
        f"bytes {media.start}-{media.end}/{media.file_size} (partial={media.partial})"
    )
    return StreamingResponse(
        streamer.iter_bytes(media),
        status_code=status.HTTP_206_PARTIAL_CONTENT if media.partial else status.HTTP_200_OK,
        headers=media.headers(),
        media_type=media.content_type,
    )

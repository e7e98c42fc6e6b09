from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from ..content import INFO_PAGES


router = APIRouter()


class InfoPage(BaseModel):
    topic: str
    title: str
    content: str


@router.get("/{topic}", response_model=InfoPage)
async def info(topic: str) -> InfoPage:
    page = INFO_PAGES.get(topic)
    if page is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown page")
    return InfoPage(topic=topic, **page)

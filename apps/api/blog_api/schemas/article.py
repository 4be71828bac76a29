"""Article API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, StrictStr


class ArticleAttributes(BaseModel):
    """Typed attribute set submitted for create or update.

    Keys outside this model (``owner_id``, ``user`` and the like) are dropped;
    ownership always comes from the authenticated principal.
    """

    model_config = ConfigDict(extra="ignore")

    title: StrictStr | None = None
    body: StrictStr | None = None


class ArticleWriteRequest(BaseModel):
    article: ArticleAttributes


class Article(BaseModel):
    id: str
    title: str
    body: str
    created_at: datetime
    updated_at: datetime

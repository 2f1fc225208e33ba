from pydantic import BaseModel


class ReleaseExpiredResponse(BaseModel):
    count: int

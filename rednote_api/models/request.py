from pydantic import BaseModel, Field
from typing import Optional

class ProbeRequest(BaseModel):
    # Validated at the endpoint so bad URLs get the {ok:false} shape
    url: Optional[str] = Field(None, description="Media URL to check")

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, PlainSerializer

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

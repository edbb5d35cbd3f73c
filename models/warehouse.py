from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class Warehouse(BaseModel):
    """A warehouse belonging to the active company; receives purchase orders."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="warehouseId")
    code: Optional[str] = None
    name: str

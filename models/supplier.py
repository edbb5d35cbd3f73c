from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal


SupplierStatus = Literal["active", "inactive", "trial"]


class Supplier(BaseModel):
    """
    A supplier from the company's supplier directory.
    Loaded from the reference data service and never mutated by the intake flow.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="supplierId")
    name: str
    contact_name: Optional[str] = Field(default=None, alias="contactName")
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[SupplierStatus] = None

    @property
    def searchable_fields(self) -> List[str]:
        """Return the lower-cased fields the supplier picker searches on."""
        return [f.lower() for f in (self.name, self.contact_name, self.email) if f]

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportActivityTypeOut(BaseModel):
    """Catalog entry for activity types that are numbered with correlatives."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    nombre: str
    siglainf: Optional[str] = Field(default=None, validation_alias="sigla_informe")

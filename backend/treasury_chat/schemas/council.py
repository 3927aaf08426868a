from pydantic import BaseModel, Field

class CouncilOut(BaseModel):
    id: int = 1
    name: str
    council_id: str = Field(alias="councilId")
    financial_year: str = Field(alias="financialYear")

    class Config:
        populate_by_name = True

from pydantic import BaseModel


class YearTotal(BaseModel):
    year: int
    total: int


class YearMonthTotal(BaseModel):
    year: int
    month: int
    total: int


class YearGenderTotal(BaseModel):
    year: int
    gender: str
    total: int


class AgeGroupTotal(BaseModel):
    age_group: str
    total: int

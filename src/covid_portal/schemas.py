from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, conint
from pydantic.alias_generators import to_camel

# Range of a 64-bit SQL INTEGER / BIGINT column
SQL_INT_MIN = -(2**63)
SQL_INT_MAX = 2**63 - 1


class CamelModel(BaseModel):
    """Base model exposing snake_case attributes under camelCase wire names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class APIMessage(BaseModel):
    message: str = Field(..., description="Human readable message")


class LoginRequest(BaseModel):
    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")


class LoginResponse(CamelModel):
    jwt_token: str = Field(..., description="JWT access token")


class State(CamelModel):
    state_id: int
    state_name: Optional[str] = None
    population: Optional[int] = None


class District(CamelModel):
    district_id: int
    district_name: Optional[str] = None
    state_id: Optional[int] = None
    cases: Optional[int] = None
    cured: Optional[int] = None
    active: Optional[int] = None
    deaths: Optional[int] = None


class DistrictIn(CamelModel):
    state_id: conint(ge=SQL_INT_MIN, le=SQL_INT_MAX) = Field(..., description="Id of the state the district belongs to")
    district_name: str = Field(..., min_length=1, description="District name")
    cases: conint(ge=0, le=SQL_INT_MAX) = Field(..., description="Total confirmed cases")
    cured: conint(ge=0, le=SQL_INT_MAX) = Field(..., description="Total cured")
    active: conint(ge=0, le=SQL_INT_MAX) = Field(..., description="Currently active cases")
    deaths: conint(ge=0, le=SQL_INT_MAX) = Field(..., description="Total deaths")


class StateStats(CamelModel):
    """Per-state sums. Each total is null when the state has no districts."""

    total_cases: Optional[int] = None
    total_cured: Optional[int] = None
    total_active: Optional[int] = None
    total_deaths: Optional[int] = None

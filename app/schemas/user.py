from pydantic import BaseModel, ConfigDict


class ShareableUser(BaseModel):
    """A user that can be picked as a grantee"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str


class ShareableUserListResponse(BaseModel):
    users: list[ShareableUser]

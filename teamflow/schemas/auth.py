from teamflow.schemas.common import InputModel


class LoginRequest(InputModel):
    username: str
    password: str

from typing import Union

from pydantic import BaseModel, Field


class SendCodeRequest(BaseModel):
    to: str = Field(..., min_length=1)


class ConfirmCodeRequest(BaseModel):
    code: Union[int, str]
    to: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    to: str = Field(..., min_length=1)


class ResetPasswordActionRequest(BaseModel):
    to: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    password_repeat: str = Field(..., min_length=1)

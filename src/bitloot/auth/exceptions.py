from __future__ import annotations

from bitloot.commons.exceptions import (
    BaseServiceException,
    BaseServiceNotFoundException,
    BaseServiceUnProcessableException,
)


class AuthServiceException(BaseServiceException):
    pass


class AuthServiceNotFoundException(BaseServiceNotFoundException):
    pass


class AuthServiceUnprocessableException(BaseServiceUnProcessableException):
    pass


INVALID_CREDENTIALS = "invalid_credentials"
INVALID_REFRESH_TOKEN = "invalid_refresh_token"

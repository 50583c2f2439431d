from __future__ import annotations

from bitloot.commons.exceptions import (
    BaseServiceException,
    BaseServiceNotFoundException,
)


class AdminServiceException(BaseServiceException):
    pass


class AdminServiceNotFoundException(BaseServiceNotFoundException):
    pass


USER_NOT_FOUND = "user_not_found"
USER_ALREADY_SUSPENDED = "user_already_suspended"
USER_NOT_SUSPENDED = "user_not_suspended"

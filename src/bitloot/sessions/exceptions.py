from __future__ import annotations

from bitloot.commons.exceptions import (
    BaseServiceException,
    BaseServiceForbiddenException,
    BaseServiceNotFoundException,
)


class SessionsServiceException(BaseServiceException):
    pass


class SessionsServiceNotFoundException(BaseServiceNotFoundException):
    pass


class SessionsServiceForbiddenException(BaseServiceForbiddenException):
    pass


SESSION_NOT_FOUND = "session_not_found"
SESSION_NOT_OWNED = "session_not_owned"

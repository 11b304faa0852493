import json
import time
from collections import namedtuple

from fastapi import Request, Response
from jwcrypto import jwk, jwt  # type: ignore

from devflow.errors import UnauthorizedError

AuthUser = namedtuple("AuthUser", ["user_id", "username"])

SESSION_COOKIE = "__session"


class Auth:
    """
    Cookie sessions. The cookie holds an HS256 JWT whose subject is the
    user id; nothing about the session is kept server side.
    """

    def __init__(self, key: jwk.JWK, max_age: int, secure: bool = True):
        self.key = key
        self.max_age = max_age
        self.secure = secure

    @classmethod
    def from_secret(cls, secret: str, max_age: int, secure: bool = True) -> "Auth":
        return cls(jwk.JWK.from_password(secret), max_age, secure)

    def issue(self, user_id: int) -> str:
        now = int(time.time())
        token = jwt.JWT(
            header={"alg": "HS256", "typ": "JWT"},
            claims={"sub": str(user_id), "iat": now, "exp": now + self.max_age},
        )
        token.make_signed_token(self.key)
        return str(token.serialize())

    def user_id(self, request: Request) -> int:
        session = request.cookies.get(SESSION_COOKIE)
        if not session:
            raise UnauthorizedError()
        try:
            token = jwt.JWT(key=self.key, jwt=session, expected_type="JWS")
            claims = json.loads(token.claims)
            return int(claims["sub"])
        except Exception as e:
            raise UnauthorizedError() from e

    def sign_in(self, response: Response, user_id: int) -> None:
        response.set_cookie(
            SESSION_COOKIE,
            self.issue(user_id),
            max_age=self.max_age,
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )

    def sign_out(self, response: Response) -> None:
        response.delete_cookie(
            SESSION_COOKIE, httponly=True, secure=self.secure, samesite="lax"
        )

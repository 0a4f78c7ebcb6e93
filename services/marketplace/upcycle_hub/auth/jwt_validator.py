"""
JWT validator with JWKS-based verification for Clerk session tokens
"""
import jwt
from jwt import PyJWKClient
import logging
from typing import Optional, Dict
from upcycle_hub.config import settings
from upcycle_hub.exceptions import InvalidCredentialsError, ExternalServiceError

logger = logging.getLogger(__name__)


class JWTValidator:
    def __init__(self, issuer: Optional[str] = None, jwks_url: Optional[str] = None):
        self.issuer = (issuer or settings.clerk_issuer or "").rstrip("/")
        if not self.issuer:
            raise ValueError("CLERK_ISSUER must be configured for Clerk authentication")
        self.jwks_url = jwks_url or settings.clerk_jwks_url or f"{self.issuer}/.well-known/jwks.json"

        # Create JWKS client with caching
        self.jwks_client = PyJWKClient(self.jwks_url, cache_keys=True, max_cached_keys=10)

    def verify_token(self, token: str) -> Dict:
        """
        Verify JWT token using JWKS.
        Returns decoded token payload if valid.
        """
        try:
            signing_key = self.jwks_client.get_signing_key_from_jwt(token)

            # Clerk session tokens carry no audience
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                issuer=self.issuer,
                options={
                    "verify_signature": True,
                    "verify_aud": False,
                    "verify_iss": True,
                    "verify_exp": True,
                }
            )
        except jwt.ExpiredSignatureError:
            logger.warning("JWT token has expired")
            raise InvalidCredentialsError("Token has expired")
        except jwt.PyJWKClientError as e:
            logger.error(f"Error fetching signing key from {self.jwks_url}: {e}")
            raise ExternalServiceError("Authentication service unavailable")
        except jwt.InvalidTokenError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise InvalidCredentialsError("Invalid authentication credentials")

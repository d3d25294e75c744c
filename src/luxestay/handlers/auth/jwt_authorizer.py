import logging
import os
from boto3 import resource

from luxestay.common.repository.token_repo import TokenRepository
from luxestay.common.repository.user_repo import UserRepository
from luxestay.common.services.user_service import UserService
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import AuthError
from luxestay.common.utils.jwt_service import TokenCodec, strip_bearer

logger = logging.getLogger()
logger.setLevel(logging.INFO)

JWT_SECRET = os.environ.get("JWT_SECRET")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
TABLE_NAME = os.environ.get("TABLE_NAME")

if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET environment variable is not set")

dynamodb = resource("dynamodb", region_name=AWS_REGION)
table = dynamodb.Table(TABLE_NAME)

service = UserService(
    user_repo=UserRepository(table),
    token_codec=TokenCodec(JWT_SECRET, JWT_ALGORITHM),
    token_repo=TokenRepository(table),
)


def _generate_policy(principal_id, effect, resource, context=None):
    auth_response = {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "execute-api:Invoke",
                    "Effect": effect,
                    "Resource": resource,
                }
            ],
        },
    }

    if context:
        auth_response["context"] = {
            k: str(v) for k, v in context.items()
        }

    return auth_response


def _get_stage_arn(method_arn: str) -> str:
    parts = method_arn.split("/")
    return "/".join(parts[:2]) + "/*/*"


def _extract_token(event):
    headers = event.get("headers") or {}
    raw = (
        event.get("authorizationToken")
        or headers.get("Authorization")
        or headers.get("authorization")
    )
    return strip_bearer(raw)


def lambda_handler(event, context):
    resource_arn = _get_stage_arn(event["methodArn"])
    try:
        token = _extract_token(event)
        if not token:
            raise AuthError("Missing Authorization header")

        claims = service.verify_token(token)

        return _generate_policy(
            principal_id=claims.user_id,
            effect="Allow",
            resource=resource_arn,
            context={
                "user_id": claims.user_id,
                "email": claims.email,
                "role": claims.role,
                "token_id": claims.token_id,
            },
        )

    except AuthError as e:
        logger.info(f"Authorization failed: {e.__class__.__name__}: {e}")
    except Exception:
        logger.exception("Authorization failed")

    return _generate_policy(
        principal_id="unauthorized",
        effect="Deny",
        resource=resource_arn,
    )

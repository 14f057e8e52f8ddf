import logging
import jwt

from hostel.utils import jwt_service

logger = logging.getLogger()
logger.setLevel(logging.INFO)

if not jwt_service.SECRET_KEY:
    raise RuntimeError("JWT_SECRET environment variable is not set")


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

    # API Gateway only forwards flat string values
    if context:
        auth_response["context"] = {k: str(v) for k, v in context.items()}

    return auth_response


def _get_stage_arn(method_arn: str) -> str:
    parts = method_arn.split("/")
    return "/".join(parts[:2]) + "/*/*"


def _bearer_token(event):
    headers = event.get("headers") or {}
    token = headers.get("Authorization") or headers.get("authorization")
    if token and token.startswith("Bearer "):
        token = token[len("Bearer "):]
    return token


def lambda_handler(event, context):
    resource = _get_stage_arn(event["methodArn"])

    token = _bearer_token(event)
    if not token:
        logger.info("Authorization failed: missing Authorization header")
        return _generate_policy("unauthorized", "Deny", resource)

    try:
        caller = jwt_service.decode_caller(token)
    except jwt.ExpiredSignatureError:
        logger.info("Authorization failed: token expired")
        return _generate_policy("unauthorized", "Deny", resource)
    except jwt.InvalidTokenError as e:
        logger.info(f"Authorization failed: invalid token ({e})")
        return _generate_policy("unauthorized", "Deny", resource)

    if caller.role is None:
        logger.info(f"Authorization failed: unknown role for user {caller.user_id}")
        return _generate_policy("unauthorized", "Deny", resource)

    return _generate_policy(
        principal_id=caller.user_id,
        effect="Allow",
        resource=resource,
        context={
            "user_id": caller.user_id,
            "email": caller.email,
            "role": caller.role.value,
        },
    )

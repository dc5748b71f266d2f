"""
controlplane_sdk.tier1_runtime.validate
────────────────────────────────────────
Policy validation via Pydantic v2 for the surrounding config layer. Raises
controlplane ValidationError (not raw Pydantic errors), and pre-flights
destinations so a malformed policy is rejected before a synthesis pass.
"""
from __future__ import annotations

from typing import Any, Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from controlplane_sdk.tier0_core.errors import ConfigError, ValidationError
from controlplane_sdk.tier0_core.models import BackendPolicy
from controlplane_sdk.tier2_endpoints.address import parse_destination, resolve_address

T = TypeVar("T", bound=BaseModel)


def validate_input(model: Type[T], data: Any) -> T:
    """
    Validate raw data against a Pydantic model.
    Raises controlplane_sdk ValidationError (not Pydantic's) on failure.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        fields = {
            ".".join(str(loc) for loc in err["loc"]): err["msg"]
            for err in exc.errors()
        }
        raise ValidationError(
            code="validation_error",
            user_message=f"{model.__name__} validation failed.",
            fields=fields,
        ) from exc


def validate_policy(data: dict[str, Any]) -> BackendPolicy:
    """
    Build a BackendPolicy from a raw config mapping.

    Accepts the flat ``tls_client_cert`` / ``tls_client_key`` keys used in
    policy files and folds them into ``client_certificate``.

    Usage:
        policy = validate_policy({"from": "https://app.example.com",
                                  "to": "http://app.internal:8080"})
    """
    data = dict(data)
    cert = data.pop("tls_client_cert", None)
    key = data.pop("tls_client_key", None)
    if cert or key:
        data["client_certificate"] = {"cert_pem": cert or "", "key_pem": key or ""}
    return validate_input(BackendPolicy, data)


def validate_policies(policies: Iterable[BackendPolicy]) -> dict[int, ConfigError]:
    """
    Pre-flight every policy destination through the address resolver.
    Returns {policy index: error} for each policy the config layer should
    reject; an empty dict means the whole list is safe to synthesize.
    """
    errors: dict[int, ConfigError] = {}
    for index, policy in enumerate(policies):
        try:
            dest = parse_destination(policy.destination)
            resolve_address(dest.host, dest.port, tls=dest.scheme == "https")
        except ConfigError as exc:
            errors[index] = exc
    return errors


__all__ = ["validate_input", "validate_policy", "validate_policies"]

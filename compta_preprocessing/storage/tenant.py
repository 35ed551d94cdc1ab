from pathlib import Path

from compta_preprocessing.config.exceptions import ConfigurationError


def tenant_key_from_business_id(business_id: str, length: int = 9) -> str:
    """Derive the tenant key: the leading ``length`` digits of a business id.

    ``"123 456 789 00012"`` (a SIRET) gives ``"123456789"`` (its SIREN).

    Raises:
        ConfigurationError: if the id has fewer than ``length`` digits.
    """
    digits = "".join(ch for ch in str(business_id) if ch.isdigit())
    if not digits:
        raise ConfigurationError("Tenant key is missing: business id has no digits")
    if len(digits) < length:
        raise ConfigurationError(
            f"Business id '{business_id}' is too short for a {length}-digit tenant key"
        )
    return digits[:length]


def processed_folder(root: Path, tenant_key: str, folder_name: str) -> Path:
    """Canonical artifact folder: {root}/{tenant_key}/{folder_name}"""
    return root / tenant_key / folder_name

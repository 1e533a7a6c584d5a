from pydantic import BaseModel, Field

LEGACY_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
ARGON2ID_PREFIX = "$argon2id$"


class HasherParams(BaseModel):
    """Argon2id cost parameters.

    Encoded hashes carry their own parameters, so changing these only affects
    newly produced hashes.
    """

    time_cost: int = Field(default=3, ge=1)
    memory_cost: int = Field(default=65536, ge=8, description="KiB")
    parallelism: int = Field(default=4, ge=1)
    hash_len: int = Field(default=32, ge=16)
    salt_len: int = Field(default=16, ge=16)

    model_config = {"frozen": True}

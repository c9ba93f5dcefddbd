"""Code generation options."""
from pydantic import BaseModel, ConfigDict


class GeneratorConfig(BaseModel):
    """Options that shape the generated Rust code."""

    model_config = ConfigDict(frozen=True)

    use_uuid: bool = False          # uuid -> uuid::Uuid instead of String
    derive_serde: bool = True       # derive Serialize/Deserialize, emit renames

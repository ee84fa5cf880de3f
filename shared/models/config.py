from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Declares one environment setting a client needs before it can talk to its backend.

    Attributes:
        env_key (str): Key suffix, expanded to "<TYPE>_<ENGINE>_<KEY>" by the client (e.g. "API_KEY" → "LLM_OPENAI_API_KEY").
        val_type (str): Expected value type: "string", "number", "bool" or "list".
        default (str | int | float | bool | list | None): Fallback value. None marks the setting as mandatory.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None

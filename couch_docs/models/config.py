from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Describes one environment setting a client needs.

    Attributes:
        env_key (str): The key of the setting, without the client/engine prefix (e.g. "BASE_URL").
        val_type (str): The expected type of the value: "string", "number", "bool" or "list".
        default (str | int | float | bool | list | None): Value used when the variable is not set. None makes the setting mandatory.
    """

    env_key: str
    val_type: str = "string"
    default: str | int | float | bool | list | None = None

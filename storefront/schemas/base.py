from pydantic import BaseModel, ConfigDict, model_validator


class RequestModel(BaseModel):
    """Base for request bodies.

    JSON bodies and multipart forms both land here. Blank strings and
    nulls count as "not sent", so required fields report as missing and
    patches leave them unset.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data):
        if isinstance(data, dict):
            return {
                k: v
                for k, v in data.items()
                if v is not None and not (isinstance(v, str) and not v.strip())
            }
        return data

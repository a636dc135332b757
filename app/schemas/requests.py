from pydantic import BaseModel, Field, field_validator


class TransactionSubmission(BaseModel):
    """
    Submitted transaction fields. Extra keys (including a caller timestamp)
    are ignored; the server assigns its own timestamp.
    """

    transaction_id: str
    user_id: str
    amount: float = Field(allow_inf_nan=False)
    device_id: str

    @field_validator("transaction_id", "user_id", "device_id", mode="before")
    @classmethod
    def validate_identifier(cls, v):
        if v is None or v == "":
            raise ValueError("field is required")
        if isinstance(v, bool) or not isinstance(v, (str, int)):
            raise ValueError("identifier must be a string or integer")
        return str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        if v is None:
            raise ValueError("amount is required")
        # JSON numbers only, no coercion from strings or booleans
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("amount must be a number")
        try:
            return float(v)
        except OverflowError:
            raise ValueError("amount is out of range")

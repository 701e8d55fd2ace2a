from tipjar.schemas.my_base_model import CustomBaseModel


class HealthCheck(CustomBaseModel):
    status: str = "ok"
    timestamp: str = ""
    environment: str = ""

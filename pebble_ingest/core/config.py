from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    DATABASE_URL: str
    LOG_LEVEL: str = "INFO"

    CHAIN_ENDPOINT: str = "https://babel-api.mainnet.iotex.io"
    CHAIN_REQUEST_TIMEOUT: int = 10
    IOID_CONTRACT_ADDR: str
    IOID_REGISTRY_CONTRACT_ADDR: str

    MQTT_ENABLED: bool = False
    MQTT_BROKER_HOST: str = "localhost"
    MQTT_BROKER_PORT: int = 1883
    MQTT_TOPIC_ROOT: str = "pebble/device"
    MQTT_USERNAME: Optional[str] = None
    MQTT_PASSWORD: Optional[str] = None

    class Config:
        env_file = ".env"

settings = Settings()

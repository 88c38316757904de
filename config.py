from pydantic import PrivateAttr
from pydantic_settings import BaseSettings


DEFAULT_APPLICATION_COMMENT = (
    "접수 완료 후 담당자가 순차적으로 연락드립니다.\n"
    "궁금하신점이나 문의사항이 있으시면 010-8781-8871로 문의해주세요."
)

DEFAULT_BUSINESS_ANNOUNCEMENT = (
    "본 견적서는 수급상황에 따라, 금액과 부품이 대체/변동 될 수 있습니다.\n"
    "상품의 사양 및 가격은 제조사의 정책에 따라 변경될 수 있습니다.\n"
    "계약금 입금 후 주문이 확정됩니다.\n"
    "부가세는 별도입니다."
)

DEFAULT_CONSUMER_ANNOUNCEMENT = (
    "본 견적서는 수급상황에 따라, 금액과 부품이 대체/변동 될 수 있습니다.\n"
    "상품의 사양 및 가격은 제조사의 정책에 따라 변경될 수 있습니다.\n"
    "계약금 입금 후 주문이 확정됩니다."
)

DEFAULT_DELIVERY_ANNOUNCEMENT = "납품 내역을 확인하신 후 서명해 주시기 바랍니다."


class Settings(BaseSettings):
    app_name: str = "Service Desk API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./service_desk.db"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Trust X-User-Id / X-User-Authority from an auth proxy in front of the API
    trust_session_headers: bool = False

    storage_dir: str = "./storage"
    storage_base_url: str = "http://localhost:3005/files"

    max_attachments: int = 5
    max_application_file_mb: int = 50
    max_review_image_mb: int = 10
    upload_delay_seconds: float = 0.1
    rollback_batch_size: int = 3
    rollback_batch_delay_seconds: float = 0.1

    default_application_comment: str = DEFAULT_APPLICATION_COMMENT
    default_business_announcement: str = DEFAULT_BUSINESS_ANNOUNCEMENT
    default_consumer_announcement: str = DEFAULT_CONSUMER_ANNOUNCEMENT
    default_delivery_announcement: str = DEFAULT_DELIVERY_ANNOUNCEMENT

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    _is_sqlite: bool = PrivateAttr(default=False)

    def model_post_init(self, __context: object) -> None:
        _scheme = self.database_url.split(":")[0].lower()
        object.__setattr__(self, "_is_sqlite", "sqlite" in _scheme)

    @property
    def is_sqlite(self) -> bool:
        return self._is_sqlite

    @property
    def max_application_file_bytes(self) -> int:
        return self.max_application_file_mb * 1024 * 1024

    @property
    def max_review_image_bytes(self) -> int:
        return self.max_review_image_mb * 1024 * 1024


settings = Settings()

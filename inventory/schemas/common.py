from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON 키는 camelCase, 파이썬 속성은 snake_case"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,  # SQLAlchemy 모델 객체 → Pydantic 자동 변환
    )


class MessageResponse(BaseModel):
    """데이터 없이 메시지만 돌려주는 성공 응답"""
    success: bool = True
    message: str


class PageMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int
